"""
Contents of the configuration files written into a new package.

Everything here is a pure function of the run context; writing happens in the
orchestrator through ``ConfigFileWriter``.
"""

from typing import Any

BASE_DEV_DEPENDENCIES = [
    "prettier",
    "typescript",
    "eslint",
    "husky",
    "semantic-release",
    "@commitlint/cli",
    "@commitlint/config-conventional",
]

TEST_DEV_DEPENDENCIES = ["mocha", "nyc", "ts-node", "@types/mocha", "@types/node"]

EDITORCONFIG = "\n".join(
    [
        "[*]",
        "insert_final_newline = true",
        "end_of_line = lf",
        "charset = utf-8",
        "trim_trailing_whitespace = true",
        "indent_style = space",
        "indent_size = 4",
        "",
        "[*.{json,js,yml}]",
        "indent_size = 2",
        "",
        "[*.md]",
        "trim_trailing_whitespace = false",
        "",
    ]
)

VSCODE_SETTINGS = {
    "editor.formatOnSave": True,
    "typescript.format.semicolons": "remove",
    "eslint.validate": ["javascript", "javascriptreact", "typescript", "typescriptreact"],
    "editor.codeActionsOnSave": {
        "source.fixAll.eslint": True,
    },
}


def dev_dependencies(scope: str, has_tests: bool) -> list[str]:
    """Dev dependencies the generated package needs for the given features."""
    names = [
        *BASE_DEV_DEPENDENCIES,
        f"{scope}/eslint-config",
        f"{scope}/tsconfig",
        f"{scope}/prettierrc",
    ]
    if has_tests:
        names.extend(TEST_DEV_DEPENDENCIES)
    return names


def missing_dependencies(required: list[str], manifest: dict[str, Any] | None) -> list[str]:
    declared = set(((manifest or {}).get("devDependencies") or {}).keys())
    return [name for name in required if name not in declared]


def tsconfig(scope: str, uses_node: bool) -> dict[str, Any]:
    # Browser-only packages ship ES modules
    return {
        "extends": f"{scope}/tsconfig",
        "compilerOptions": {
            "target": "es2018",
            "module": "commonjs" if uses_node else "esnext",
            "moduleResolution": "node",
            "sourceMap": True,
            "declaration": True,
            "declarationMap": True,
            "inlineSources": True,
            "outDir": "dist",
            "rootDir": "src",
            "esModuleInterop": True,
            "allowSyntheticDefaultImports": True,
        },
    }


def eslintrc(scope: str) -> dict[str, Any]:
    return {
        "extends": [f"{scope}/eslint-config"],
        "parserOptions": {
            "project": "tsconfig.json",
        },
    }


def prettier_config(scope: str) -> str:
    return f"module.exports = require('{scope}/prettierrc')\n"


def prettierignore(has_tests: bool) -> str:
    lines = ["package.json", "package-lock.json", "dist/"]
    if has_tests:
        lines += [".nyc_output/", "coverage/"]
    return "\n".join(lines) + "\n"


def gitignore(has_tests: bool) -> str:
    lines = ["dist/", "node_modules/"]
    if has_tests:
        lines += ["coverage/", ".nyc_output/"]
    return "\n".join(lines) + "\n"


def renovate(org: str) -> dict[str, Any]:
    return {
        "extends": [f"github>{org}/renovate-config"],
        "semanticCommits": True,
    }


def package_manifest(
    name: str,
    description: str,
    license_name: str,
    repository_url: str,
    has_tests: bool,
) -> dict[str, Any]:
    """
    Build the package.json of a new package.

    Args:
        name: npm package name, possibly scoped
        description: One line description
        license_name: SPDX identifier or UNLICENSED
        repository_url: git clone URL
        has_tests: Whether to add test tooling (mocha + nyc)

    Returns:
        package.json contents
    """
    scripts: dict[str, str] = {}
    if has_tests:
        scripts["test"] = "nyc mocha"
    scripts.update(
        {
            "semantic-release": "semantic-release",
            "prettier": "prettier '**/*.{js?(on),ts?(x),scss,md,yml}' --write --list-different",
            "prettier-check": "npm run prettier -- --write=false",
            "eslint": "eslint './src/*.ts?(x)' './*.ts?(x)'",
            "build": "tsc -p .",
            "watch": "tsc -p . -w",
        }
    )

    manifest: dict[str, Any] = {
        "name": name,
        "description": description,
        "version": "0.0.0-DEVELOPMENT",
        "license": license_name,
        "repository": {
            "type": "git",
            "url": repository_url,
        },
        "files": ["dist"],
        "main": "dist/index.js",
        "types": "dist/index.d.ts",
        "scripts": scripts,
        "commitlint": {
            "extends": ["@commitlint/config-conventional"],
        },
        "husky": {
            "hooks": {
                "commit-msg": "commitlint -e $HUSKY_GIT_PARAMS",
            },
        },
    }

    if has_tests:
        manifest["nyc"] = {
            "include": ["src/**/*.ts?(x)"],
            "exclude": ["**/*.test.ts?(x)"],
            "extension": [".tsx", ".ts"],
        }
        manifest["mocha"] = {
            "require": "ts-node/register",
            "spec": "src/**/*.test.ts",
        }

    return manifest


def fill_license(template: str, year: int, holder: str) -> str:
    return template.replace("[year]", str(year)).replace("[fullname]", holder)
