"""
Stockage clé/valeur local du client (équivalent d'un AsyncStorage mobile).
- JsonFileStorage: un fichier JSON unique, écrit de manière atomique (fichier temporaire + replace)
- MemoryStorage: dictionnaire en mémoire (tests)
"""
from pathlib import Path
from typing import Dict, Optional, Protocol
import json
import logging
import os

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    async def get_item(self, key: str) -> Optional[str]: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            content = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except ValueError:
            logger.warning("cart.storage fichier illisible, ignoré path=%s", self.path)
            return {}
        return content if isinstance(content, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp, self.path)

    async def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return str(value) if value is not None else None

    async def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    async def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
