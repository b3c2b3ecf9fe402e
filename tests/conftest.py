from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest

from option_inquiry import config as inquiry_config

VANILLA_SHEET = "香草看涨报价"
REFERENCE_SHEET = "7095"


@pytest.fixture(autouse=True)
def clear_inquiry_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ.keys()):
        if key.startswith("OPTION_INQUIRY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(inquiry_config, "DEFAULT_INQUIRY_CONFIG_JSON", tmp_path / "no-config.json")


@pytest.fixture
def quote_tables() -> dict[str, list[dict[str, Any]]]:
    return {
        REFERENCE_SHEET: [
            {"代码": "000001", "标的": "平安银行", "现价": 11.2},
            {"代码": "300750", "标的": "宁德时代", "现价": "n/a", "收盘价": 180.5},
        ],
        VANILLA_SHEET: [
            {
                "证券代码": "600519",
                "证券简称": "贵州茅台",
                "现价": 1500.0,
                "1m(Exp.25/08/04)": 2.5,
                "1m( 90call )": 3.1,
                "1m( 110call )": 0.9,
                "1m( 100put )": 2.2,
                "1m( 105put )": 4.4,
                "1m( 95put )": 1.1,
            },
        ],
    }
