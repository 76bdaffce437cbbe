"""Validation gate — rejects incomplete batch requests before any side effect."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..common import normalize_business_date
from ..errors import ValidationError
from .resolver import BackupConfiguration

# Accepted keys, first match wins. The camelCase names are the batch
# framework's wire names.
BATCH_ID_KEYS = ("batch_id", "batchId")
CATEGORY_CODE_KEYS = ("category_code", "batchCategoryCode", "categoryCode")
BUSINESS_DATE_KEYS = ("business_date", "businessDate")


@dataclass(frozen=True)
class BatchRequest:
    batch_id: str
    category_code: str
    business_date: Optional[str] = None  # YYYYMMDD


def _first(params: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if params.get(key) is not None:
            return params[key]
    return None


def _required(params: Mapping[str, Any], keys: tuple[str, ...], description: str) -> str:
    value = _first(params, keys)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{description} is required")
    return str(value).strip()


def validate_batch_params(params: Optional[Mapping[str, Any]]) -> BatchRequest:
    """Check the batch parameter bundle and return it as a typed request."""
    if not params:
        raise ValidationError("Batch parameters cannot be null or empty")

    batch_id = _required(params, BATCH_ID_KEYS, "Batch ID")
    category_code = _required(params, CATEGORY_CODE_KEYS, "Category code")

    business_date = None
    raw_date = _first(params, BUSINESS_DATE_KEYS)
    if raw_date is not None and str(raw_date).strip():
        try:
            business_date = normalize_business_date(str(raw_date))
        except ValueError as e:
            raise ValidationError(f"Invalid business date '{raw_date}': {e}") from e

    return BatchRequest(batch_id=batch_id, category_code=category_code, business_date=business_date)


def validate_backup_config(config: BackupConfiguration, category_code: str) -> None:
    """Reject configurations that could never authenticate against the API."""
    if not config.api_token.strip():
        raise ValidationError(f"API token is required for backup configuration '{category_code}'")
    if not config.universe_id.strip():
        raise ValidationError(f"Universe UUID is required for backup configuration '{category_code}'")
