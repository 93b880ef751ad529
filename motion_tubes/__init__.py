"""Motion-tube templates and laser-scan based tube selection for unicycle robots."""

__version__ = "0.1.0"
__all__ = ["template_generator", "controller"]