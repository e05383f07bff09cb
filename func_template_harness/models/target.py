"""Models for discovered template targets."""

from pydantic import Field, computed_field

from func_template_harness.models.base import Model


class Target(Model):
    """One (language, template) combination under test."""

    language: str = Field(..., description="Language directory name (e.g., 'go')")
    template: str = Field(..., description="Template directory name (e.g., 'http')")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def name(self) -> str:
        """Function name used for the scratch directory, e.g. ``go-http``."""
        return f"{self.language}-{self.template}"

    @property
    def label(self) -> str:
        return f"{self.language}/{self.template}"
