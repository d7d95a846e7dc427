"""In-memory obfuscation tables.

A table maps names from a left namespace to a right namespace. For ProGuard
files the left side holds original names and the right side obfuscated ones;
for TSRG files the left side holds obfuscated names and the right side
intermediate ones. Class names use the internal ``a/b/Name`` form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_CLASS_REF_RE = re.compile(r"L([^;]+);")


@dataclass(frozen=True)
class MemberMapping:
    """A field or method name pair; methods carry a left-namespace descriptor."""

    left: str
    right: str
    descriptor: str | None = None


@dataclass(frozen=True)
class ClassMapping:
    """One class with its field and method name pairs."""

    left: str
    right: str
    fields: dict[str, MemberMapping] = field(default_factory=dict)
    methods: dict[tuple[str, str], MemberMapping] = field(default_factory=dict)

    def remap_field(self, name: str) -> str | None:
        member = self.fields.get(name)
        return member.right if member is not None else None

    def remap_method(self, name: str, descriptor: str) -> str | None:
        member = self.methods.get((name, descriptor))
        return member.right if member is not None else None


@dataclass(frozen=True)
class MappingTable:
    """Immutable class table keyed by left-namespace class name."""

    classes: dict[str, ClassMapping] = field(default_factory=dict)

    def get_class(self, name: str) -> ClassMapping | None:
        return self.classes.get(name)

    def remap_class(self, name: str) -> str:
        cls = self.classes.get(name)
        return cls.right if cls is not None else name

    def remap_descriptor(self, descriptor: str) -> str:
        """Rewrite every class reference in a JVM descriptor to the right namespace."""

        return _CLASS_REF_RE.sub(lambda match: f"L{self.remap_class(match.group(1))};", descriptor)

    def iter_classes(self) -> list[ClassMapping]:
        return [self.classes[key] for key in sorted(self.classes)]
