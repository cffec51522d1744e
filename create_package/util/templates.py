"""
Template loading and rendering utilities using Jinja2.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

# Templates shipped with the package
DEFAULT_TEMPLATES = Path(__file__).parent.parent / "templates"


class TemplateLoader:
    """
    Loads and renders Jinja2 templates.

    Supports an organization-specific template directory with fallback to the
    templates shipped with create-package.
    """

    def __init__(self, custom_templates: Path | None = None):
        """
        Initialize template loader.

        Args:
            custom_templates: Optional directory whose templates take precedence
        """
        self.custom_templates = custom_templates
        self.default_templates = DEFAULT_TEMPLATES
        self._env: Environment | None = None
        self._template_cache: dict[str, Template] = {}

    @property
    def env(self) -> Environment:
        """
        Get or create Jinja2 environment (cached).

        Returns:
            Cached Jinja2 Environment configured for template loading
        """
        if self._env is None:
            template_dirs = []

            if self.custom_templates is not None and self.custom_templates.exists():
                template_dirs.append(str(self.custom_templates))

            if self.default_templates.exists():
                template_dirs.append(str(self.default_templates))

            if not template_dirs:
                raise FileNotFoundError("No template directories found")

            self._env = Environment(
                loader=FileSystemLoader(template_dirs),
                trim_blocks=True,
                lstrip_blocks=True,
                keep_trailing_newline=True,
                undefined=StrictUndefined,
            )

        return self._env

    def load_template(self, template_name: str) -> Template:
        """Load a Jinja2 template with caching."""
        if template_name not in self._template_cache:
            self._template_cache[template_name] = self.env.get_template(template_name)

        return self._template_cache[template_name]

    def render(self, template_name: str, context: dict) -> str:
        """
        Render a template to a string.

        Args:
            template_name: Template name (e.g., "README.md.j2")
            context: Dictionary of template variables

        Returns:
            Rendered text
        """
        return self.load_template(template_name).render(**context)
