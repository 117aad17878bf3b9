import json
import os
from pathlib import Path
from typing import Dict


class LedgerError(RuntimeError):
    pass


def load_notified(path) -> Dict[int, bool]:
    """
    Reads the notified-ID ledger: a JSON object of stringified incident ids
    mapped to true. A missing or empty file is an empty ledger.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise LedgerError(f"read failed path={path} err={e}") from e

    if not text.strip():
        return {}

    try:
        data = json.loads(text)
    except ValueError as e:
        raise LedgerError(f"decode failed path={path} err={e}") from e
    if not isinstance(data, dict):
        raise LedgerError(f"expected JSON object path={path}")

    notified: Dict[int, bool] = {}
    for key, value in data.items():
        try:
            incident_id = int(key)
        except ValueError as e:
            raise LedgerError(f"bad incident id {key!r} path={path}") from e
        if value:
            notified[incident_id] = True
    return notified


def save_notified(path, notified: Dict[int, bool]) -> None:
    path = Path(path)
    payload = {str(k): True for k in sorted(notified) if notified[k]}
    if path.parent != Path(""):
        path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    os.replace(tmp_path, path)
