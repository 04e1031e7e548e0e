# gridrush/config.py
from __future__ import annotations
import json, logging, os
from typing import Dict, Any

from pathlib import Path
PKG_DIR = Path(__file__).resolve().parent

logger = logging.getLogger(__name__)

def _abs(path: str) -> str:
    # absolute paths are kept as given
    p = Path(path)
    return str(p) if p.is_absolute() else str((PKG_DIR / p).resolve())

PACKAGE_DIR = os.path.dirname(__file__)
CONFIG_PATH = os.environ.get("GRIDRUSH_CONFIG") or os.path.join(PACKAGE_DIR, "config.json")

DEFAULT_CFG: Dict[str, Any] = {
    "display": {"fullscreen": False, "fps": 60, "windowed_size": [720, 1280]},
    "session": {
        "level_bonus_time": 10.0,
        "base_coins": 10,
        "coins_per_level": 2,
        "boss_coin_factor": 3,
        "fever_multiplier": 1.5,
        "perk_option_count": 3,
        "auto_advance_rounds": False,
        "memory_preview_sec": 3.0,
    },
    "save": {"path": "save.json"},
}

def _deepcopy(obj):
    return json.loads(json.dumps(obj))

def _merge(dst: dict, src: dict) -> dict:
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _merge(dst[k], v)
        else:
            dst[k] = v
    return dst

def _section(cfg: dict, key: str) -> dict:
    # a null or scalar section in the user file is treated as missing
    if not isinstance(cfg.get(key), dict):
        cfg[key] = {}
    return cfg[key]

def _sanitize_cfg(cfg: dict) -> dict:
    d = _section(cfg, "display")
    d["fullscreen"] = bool(d.get("fullscreen", False))
    d["fps"] = int(max(30, min(240, d.get("fps", 60))))
    ws = d.get("windowed_size", [720, 1280])
    if isinstance(ws, (list, tuple)) and len(ws) == 2 and all(isinstance(x, (int, float)) for x in ws):
        w, h = max(200, min(10000, int(ws[0]))), max(200, min(10000, int(ws[1])))
        d["windowed_size"] = [w, h]
    else:
        d["windowed_size"] = [720, 1280]

    s = _section(cfg, "session")
    s["level_bonus_time"]    = float(max(0.0, min(120.0, s.get("level_bonus_time", 10.0))))
    s["base_coins"]          = int(max(0, min(10000, s.get("base_coins", 10))))
    s["coins_per_level"]     = int(max(0, min(1000, s.get("coins_per_level", 2))))
    s["boss_coin_factor"]    = int(max(1, min(20, s.get("boss_coin_factor", 3))))
    s["fever_multiplier"]    = float(max(1.0, min(10.0, s.get("fever_multiplier", 1.5))))
    s["perk_option_count"]   = int(max(1, min(6, s.get("perk_option_count", 3))))
    s["auto_advance_rounds"] = bool(s.get("auto_advance_rounds", False))
    s["memory_preview_sec"]  = float(max(0.0, min(30.0, s.get("memory_preview_sec", 3.0))))

    sv = _section(cfg, "save")
    path = sv.get("path") if isinstance(sv.get("path"), str) and sv.get("path") else "save.json"
    sv["path"] = _abs(path)
    cfg["config_path"] = str(Path(CONFIG_PATH).resolve())
    return cfg

def save_config(partial_cfg: dict) -> None:
    try:
        with open(CONFIG_PATH, "r", encoding="utf-8") as f:
            base = json.load(f)
        if not isinstance(base, dict): base = {}
    except (OSError, ValueError):
        base = {}
    merged = _merge(base, partial_cfg)
    try:
        with open(CONFIG_PATH, "w", encoding="utf-8") as f:
            json.dump(merged, f, ensure_ascii=False, indent=2)
    except OSError as exc:
        logger.warning("could not write %s: %s", CONFIG_PATH, exc)

def load_config() -> dict:
    cfg = _deepcopy(DEFAULT_CFG)
    try:
        with open(CONFIG_PATH, "r", encoding="utf-8") as f:
            user = json.load(f)
        if isinstance(user, dict):
            _merge(cfg, user)
    except FileNotFoundError:
        save_config(cfg)
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
    try:
        cfg = _sanitize_cfg(cfg)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("invalid values in %s, using defaults: %s", CONFIG_PATH, exc)
        cfg = _sanitize_cfg(_deepcopy(DEFAULT_CFG))
    return cfg

CFG = load_config()
