"""
Custom exceptions for create-package with helpful error messages.
"""


class CreatePackageError(Exception):
    """Base exception for create-package errors."""

    # User-facing errors are shown as a short message without a traceback
    show_stack = False

    def __init__(self, message: str, suggestion: str = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.message)

    def __str__(self):
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class ConfigurationError(CreatePackageError):
    """Configuration and environment errors."""

    pass


class MissingTokenError(ConfigurationError):
    """A required provider token is not set in the environment."""

    def __init__(self, env_var: str, create_url: str = None):
        message = f"No {env_var} env var set."
        if create_url:
            suggestion = f"Create one at {create_url} and run:\n  export {env_var}=<token>"
        else:
            suggestion = f"Set the token in your environment:\n  export {env_var}=<token>"
        self.env_var = env_var
        super().__init__(message, suggestion)


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid."""

    def __init__(self, error_details: str):
        message = f"Invalid configuration file: {error_details}"

        suggestion = (
            "Fix the .create-package.yaml file.\n"
            "Print the effective configuration with:\n"
            "  create-package show-config"
        )
        super().__init__(message, suggestion)


class MissingAnswerError(ConfigurationError):
    """A scripted run has no answer for a question."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(
            f"No answer provided for question '{key}': {message}",
            f"Add an entry for '{key}' to your answers file, or run interactively.",
        )


class ProviderError(CreatePackageError):
    """Errors reported by a remote provider."""

    pass


class MissingProviderFieldError(ProviderError):
    """A provider response lacks a field that later steps depend on."""

    def __init__(self, provider_name: str, field: str, resource_url: str):
        self.provider_name = provider_name
        self.field = field
        message = f"No {field} returned by {provider_name} for {resource_url}"
        suggestion = (
            f"Make sure the repository is registered with {provider_name}:\n"
            f"  {resource_url}\n\n"
            "Then rerun create-package; completed steps are skipped."
        )
        super().__init__(message, suggestion)


class RegistryTokenError(ProviderError):
    """The package registry did not issue a publishing token."""

    def __init__(self, registry_url: str, username: str):
        message = f"Could not get a token from {registry_url} for {username}"
        suggestion = (
            "Check the bot password and the one-time code, then rerun create-package.\n"
            "One-time codes expire after 30 seconds."
        )
        super().__init__(message, suggestion)


class ProviderAPIError(ProviderError):
    """Unexpected response from a provider API."""

    show_stack = True

    def __init__(
        self,
        provider_name: str,
        method: str,
        url: str,
        status_code: int,
        body: str = "",
    ):
        self.provider_name = provider_name
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body

        message = f"{provider_name} API call failed: {method} {url} returned {status_code}"
        if body:
            message += f"\n{body}"
        super().__init__(message)


class PollTimeoutError(ProviderError):
    """A polling loop gave up before the provider reached the expected state."""

    def __init__(self, description: str, timeout: float):
        message = f"Timed out after {timeout:g}s waiting for {description}"
        suggestion = (
            "Increase ci.poll_timeout in .create-package.yaml, or remove it to wait "
            "indefinitely, then rerun create-package."
        )
        super().__init__(message, suggestion)


class CommandError(CreatePackageError):
    """A local command (git, yarn, prettier) failed."""

    def __init__(self, command: list[str], details: str, returncode: int | None = None):
        self.command = command
        self.returncode = returncode
        status = f"exit code {returncode}" if returncode is not None else "could not run"
        message = f"Command failed ({status}): {' '.join(command)}"
        if details:
            message += f"\n{details}"
        suggestion = None
        if returncode is None:
            suggestion = f"Make sure '{command[0]}' is installed and on your PATH."
        super().__init__(message, suggestion)


class RunContextError(CreatePackageError):
    """A run context field was assigned twice."""

    show_stack = True


def format_error_for_cli(error: Exception) -> str:
    """
    Format an exception for CLI display with helpful information.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, CreatePackageError):
        output = f"[red]Error:[/red] {error.message}"
        if error.suggestion:
            output += f"\n\n[yellow]{error.suggestion}[/yellow]"
        return output
    else:
        return f"[red]Error:[/red] {str(error)}"
