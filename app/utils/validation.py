from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from .constants import AppConstants


class ValidationHelpers:
    @staticmethod
    def round_currency(amount: float) -> float:
        quantum = Decimal(1).scaleb(-AppConstants.CURRENCY_DECIMAL_PLACES)
        return float(Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP))

    @staticmethod
    def validate_splits(splits: List[Any], total_amount: float) -> Dict[str, Any]:
        """
        Validate expense splits.

        Every split needs a user id and a non-negative amount, a user may
        appear only once, and the splits may not add up to more than the
        expense itself.

        Returns:
            dict: {
                "valid": bool,         # Whether the splits are valid
                "errors": list,        # List of error messages (if any)
                "total": float         # The sum of all split amounts
            }
        """
        errors = []
        seen_users = set()
        total = 0.0

        for index, split in enumerate(splits):
            if split.user_id is None:
                errors.append(f"Split {index + 1} is missing a user")
            elif split.user_id in seen_users:
                errors.append(f"User {split.user_id} appears in more than one split")
            else:
                seen_users.add(split.user_id)

            if split.amount is None:
                errors.append(f"Split {index + 1} is missing an amount")
            elif split.amount < 0:
                errors.append(f"Split {index + 1} has a negative amount")
            else:
                total += split.amount

        total = ValidationHelpers.round_currency(total)
        if total > ValidationHelpers.round_currency(total_amount):
            errors.append(
                f"Total split amount exceeds expense amount: {total} > {total_amount}"
            )

        return {"valid": len(errors) == 0, "errors": errors, "total": total}

    @staticmethod
    def validate_file(file_type: str, file_size: Optional[int]) -> Dict[str, Any]:
        """Validate an uploaded file's MIME type and size"""
        if file_type not in AppConstants.ALLOWED_FILE_TYPES:
            allowed = ", ".join(AppConstants.ALLOWED_FILE_TYPES)
            return {
                "valid": False,
                "error": f"Unsupported file type {file_type}. Allowed: {allowed}",
            }

        max_bytes = AppConstants.MAX_FILE_SIZE_MB * 1024 * 1024
        if file_size is not None and file_size > max_bytes:
            return {
                "valid": False,
                "error": f"File exceeds {AppConstants.MAX_FILE_SIZE_MB}MB limit",
            }

        return {"valid": True}
