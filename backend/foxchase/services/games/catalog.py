import json
import logging
import os
import random
from typing import Dict, List

from .tiles import TileGrid

RANDOM_BOARD = 'Random'

log = logging.getLogger(__name__)


class UnknownBoard(KeyError):
    """Raised when a board name does not match any loaded template."""


class BoardCatalog:
    """Named board templates, loaded once at startup."""

    def __init__(self, templates: Dict[str, dict] = None):
        self.templates: Dict[str, dict] = dict(templates or {})

    def load(self, directory: str, logger=None) -> Dict[str, dict]:
        """Read every ``*.json`` template in ``directory``.

        A template that cannot be read or parsed is logged and skipped; the
        remaining ones still load.
        """
        logger = logger or log
        self.templates = {}
        try:
            filenames = sorted(os.listdir(directory))
        except OSError as exc:
            logger.error(f"[boards] cannot list {directory}: {exc}")
            return self.templates

        for filename in filenames:
            name, ext = os.path.splitext(filename)
            if ext.lower() != '.json':
                continue
            path = os.path.join(directory, filename)
            try:
                with open(path, encoding='utf-8') as fh:
                    shape = json.load(fh)
                # Parse once so broken templates never reach a room
                TileGrid.from_template(shape)
            except (OSError, ValueError) as exc:
                # json.JSONDecodeError and TemplateError are both ValueErrors
                logger.error(f"[boards] skipping {filename}: {exc}")
                continue
            self.templates[name] = shape

        if self.templates:
            logger.info(f"[boards] loaded {len(self.templates)} template(s): {', '.join(self.names())}")
        else:
            logger.warning(f"[boards] no usable templates in {directory}")
        return self.templates

    def names(self) -> List[str]:
        return sorted(self.templates)

    def resolve(self, name: str = RANDOM_BOARD, rng=None) -> str:
        """Map a requested board name to a loaded template name.

        ``Random`` picks uniformly among the loaded templates.
        """
        if name == RANDOM_BOARD:
            names = self.names()
            if not names:
                raise UnknownBoard(name)
            return (rng or random).choice(names)
        if name not in self.templates:
            raise UnknownBoard(name)
        return name

    def shape(self, name: str) -> dict:
        try:
            return self.templates[name]
        except KeyError:
            raise UnknownBoard(name) from None

    def build_grid(self, name: str) -> TileGrid:
        return TileGrid.from_template(self.shape(name))

    def __contains__(self, name):
        return name in self.templates

    def __len__(self):
        return len(self.templates)
