from __future__ import annotations
import json, importlib.resources as ir
from pathlib import Path
from typing import List, Optional
from .types import Scenario
def load_bank(path: Optional[str] = None) -> List[Scenario]:
    if path:
        data = Path(path).read_text(encoding="utf-8")
    else:
        data = ir.files(__package__).joinpath("data/scenarios.json").read_text(encoding="utf-8")
    raw = json.loads(data)
    return [Scenario.from_dict(r) for r in raw]
