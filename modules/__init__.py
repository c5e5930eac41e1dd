"""Helper modules for the OrderIntake application."""

__all__ = [
    "file_naming",
    "form_validator",
    "image_checker",
    "prefill",
    "qr_codes",
    "upload_store",
]
