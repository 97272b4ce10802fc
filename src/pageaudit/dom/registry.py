# src/pageaudit/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, Optional

from .core import ElementDefinition

logger = logging.getLogger(__name__)

ELEMENTS_PACKAGE = "pageaudit.dom.elements"


class DOMRegistry:
    """
    Central registry for element definitions, parsers, and audit rules.

    Dynamically discovers and loads ElementDefinition modules from the
    'pageaudit.dom.elements' package.
    """

    _definitions: Dict[str, ElementDefinition] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Registers every module in the elements package exposing a `DEFINITION`
        attribute (instance of `ElementDefinition`).

        A module that fails to import is a programming error and propagates.
        """
        if cls._loaded:
            return

        elements_pkg = importlib.import_module(ELEMENTS_PACKAGE)

        for _, name, _ in pkgutil.iter_modules(elements_pkg.__path__):
            module = importlib.import_module(f"{ELEMENTS_PACKAGE}.{name}")
            defn = getattr(module, "DEFINITION", None)
            if not isinstance(defn, ElementDefinition):
                continue

            cls._definitions[defn.tag_name] = defn
            logger.debug(
                "Element definition loaded: %s (%d rules, codes: %s)",
                defn.tag_name, len(defn.audit_rules), ", ".join(defn.codes)
            )

        cls._loaded = True

    @classmethod
    def get_definition(cls, tag_name: str) -> Optional[ElementDefinition]:
        """Retrieves the definition for a specific HTML tag."""
        cls.discover()
        return cls._definitions.get(tag_name)
