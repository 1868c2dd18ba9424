"""
Registry of background template defaults.

A slide whose background names a template (``background: {template: Brand}``)
inherits that template's title-prefix component unless front-matter sets
``titlePrefix`` itself.  Hosts register their templates at startup.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import TitlePrefixConfig


@dataclass
class TemplateDefaults:
    title_prefix: Optional[TitlePrefixConfig] = None


_registry: Dict[str, TemplateDefaults] = {}


def register_template(name: str, defaults: TemplateDefaults) -> None:
    _registry[name] = defaults


def unregister_template(name: str) -> None:
    _registry.pop(name, None)


def get_template_defaults(name: str) -> Optional[TemplateDefaults]:
    return _registry.get(name)


def has_template(name: str) -> bool:
    return name in _registry


def get_registered_templates() -> List[str]:
    return list(_registry)
