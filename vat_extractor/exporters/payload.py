"""Consumer payload for downstream accounting systems."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from ..analytics.vat_aggregator import totals
from ..models import Transaction

logger = logging.getLogger(__name__)


def build_payload(transactions: Iterable[Transaction], generated_at: Optional[datetime] = None) -> dict:
    """
    Build the payload sent to consumers.

    Shape: {"operations": [...], "totals": {...}, "generated_at": ISO-8601 UTC}

    Args:
        transactions: Validated transactions
        generated_at: Generation timestamp (defaults to now, UTC)

    Returns:
        JSON-serializable dictionary
    """
    transactions = list(transactions)
    generated_at = generated_at or datetime.now(timezone.utc)
    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=timezone.utc)

    return {
        'operations': [t.to_dict() for t in transactions],
        'totals': totals(transactions).to_dict(),
        'generated_at': generated_at.astimezone(timezone.utc).isoformat(),
    }


def export_payload_json(payload: dict, output_path: Path) -> Path:
    """
    Write a payload as UTF-8 JSON.

    Args:
        payload: Payload from build_payload() or ParseResult.to_payload()
        output_path: Destination file

    Returns:
        Path to created JSON file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    logger.info(f"JSON export complete: {output_path} ({len(payload.get('operations', []))} operations)")
    return output_path
