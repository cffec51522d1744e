"""
create-package: npm package infrastructure provisioning tool.

Turns an empty or partially-initialized directory into a fully wired npm
package by creating the GitHub repository, configuring CI, fetching Codecov
tokens, storing npm publishing credentials and writing the standard
configuration files.

Main features:
- Idempotent steps: safe to rerun after fixing a failure
- Buildkite CI for private packages, GitHub Actions (or Travis CI) for public ones
- Sealed GitHub Actions secrets
- Scripted answers for non-interactive runs
"""

__version__ = "0.1.0"
