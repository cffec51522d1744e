"""
Run context: the state accumulated during one provisioning session.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from create_package.exceptions import RunContextError


class Visibility(str, Enum):
    """Repository and package visibility."""

    PUBLIC = "Public"
    PRIVATE = "Private"


class LicenseName(str, Enum):
    """Licenses offered for new packages (SPDX identifiers)."""

    UNLICENSED = "UNLICENSED"
    APACHE_2 = "Apache-2.0"


DEFAULT_LICENSE = {
    Visibility.PRIVATE: LicenseName.UNLICENSED,
    Visibility.PUBLIC: LicenseName.APACHE_2,
}


@dataclass
class RunContext:
    """
    Values discovered, answered or produced during a run.

    Every field starts unset (None) and may be assigned exactly once; a second
    assignment raises ``RunContextError``. This is what guarantees a value is
    never asked for twice in the same run.
    """

    package_name: str | None = None
    description: str | None = None
    visibility: Visibility | None = None
    repo_name: str | None = None
    license_name: LicenseName | None = None
    has_tests: bool | None = None
    uses_node: bool | None = None
    codecov_upload_token: str | None = None
    codecov_image_token: str | None = None
    build_badge: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, name, None) is not None:
            raise RunContextError(f"Run context field '{name}' is already set")
        super().__setattr__(name, value)

    def require(self, name: str) -> Any:
        """Return a field that an earlier step must have set."""
        value = getattr(self, name)
        if value is None:
            raise RunContextError(f"Run context field '{name}' has not been set yet")
        return value

    @property
    def is_public(self) -> bool:
        return self.require("visibility") == Visibility.PUBLIC

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
