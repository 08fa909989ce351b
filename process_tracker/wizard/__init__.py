"""Process creation and edit wizard."""

from .wizard import ProcessWizard, WizardValidationError

__all__ = ["ProcessWizard", "WizardValidationError"]
