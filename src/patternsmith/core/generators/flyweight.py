"""Flyweight generator.

Emits a cache class that hands out shared host instances keyed by the
argument of the host's single static factory.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from patternsmith.core.config.options import Eviction, Threading
from patternsmith.core.diagnostics import catalog
from patternsmith.core.surface.model import ContractSurface, MemberDescriptor, ParameterKind
from patternsmith.core.surface.types import TypeRef

from .base import Artifact, PatternGenerator, SynthesisRequest
from .composer import ALL_VARIANTS
from .writer import SourceWriter, annotation


class FlyweightGenerator(PatternGenerator):
    pattern = "flyweight"
    variants = ALL_VARIANTS
    type_name_keys = ("cache_type_name",)

    def default_names(self, contract: ContractSurface) -> Dict[str, str]:
        return {
            "cache_type_name": f"{contract.name}Cache",
            "get_method_name": "get",
            "try_get_method_name": "try_get",
        }

    def build(self, request: SynthesisRequest, names: Dict[str, str]) -> List[Artifact]:
        host = request.contract
        factory = self._select_factory(host, request.factories)
        if factory is None:
            return []

        key_type = factory.parameters[0].type
        module = self.new_module(f"Flyweight cache for {host.qualified_name}")
        module.import_type(host.namespace, host.name)
        lru = self.options.eviction is Eviction.LRU
        locking = self.options.threading is Threading.LOCKING
        if lru:
            module.import_stdlib("from collections import OrderedDict")
        else:
            module.import_stdlib("from typing import Dict")
        if locking:
            module.import_stdlib("import threading")
        if self.options.generate_try_get:
            module.import_stdlib("from typing import Optional")

        w = module.body
        cache = names["cache_type_name"]
        with w.block(f"class {cache}:"):
            w.docstring(self._describe(host, factory))
            w.blank()
            with w.block("def __init__(self) -> None:"):
                store = "OrderedDict" if lru else "Dict"
                init = "OrderedDict()" if lru else "{}"
                w.line(f"self._items: {store}[{annotation(key_type)}, {host.name}] = {init}")
                if locking:
                    w.line("self._lock = threading.RLock()")
            w.blank()
            self._write_get(w, host, factory, names["get_method_name"], key_type, locking)
            if self.options.generate_try_get:
                w.blank()
                self._write_try_get(w, host, names["try_get_method_name"], key_type, locking)
            w.blank()
            with w.block("def clear(self) -> None:"):
                w.docstring("Drop every cached instance.")
                self._guarded(w, locking, ["self._items.clear()"])
            w.blank()
            with w.block("def __len__(self) -> int:"):
                w.line("return len(self._items)")
            w.blank()
            with w.block("def __contains__(self, key: object) -> bool:"):
                w.line("return key in self._items")

        return [
            Artifact(
                name=self.artifact_name(host),
                text=module.render(),
                pattern=self.pattern,
                type_names=(cache,),
            )
        ]

    def _select_factory(
        self, host: ContractSurface, factories: Sequence[MemberDescriptor]
    ) -> Optional[MemberDescriptor]:
        if not factories:
            self.sink.report(catalog.NO_FACTORY, host.anchor, host.name)
            return None
        if len(factories) > 1:
            listed = ", ".join(f.name for f in factories)
            self.sink.report(catalog.MULTIPLE_FACTORIES, host.anchor, host.name, len(factories), listed)
            return None
        factory = factories[0]
        problem = self._factory_problem(host, factory)
        if problem:
            self.sink.report(catalog.INVALID_FACTORY_SIGNATURE, factory.anchor or host.anchor, factory.name, problem)
            return None
        return factory

    def _factory_problem(self, host: ContractSurface, factory: MemberDescriptor) -> str:
        if not factory.static:
            return "it is not static"
        if factory.coroutine or self.handles.is_handle(factory.returns):
            return "it is asynchronous"
        if len(factory.parameters) != 1:
            return f"it takes {len(factory.parameters)} parameters"
        if factory.parameters[0].kind is not ParameterKind.POSITIONAL:
            return f"parameter '{factory.parameters[0].name}' must be positional"
        if factory.returns.base_name != host.name:
            return f"it returns '{factory.returns.render()}' instead of '{host.name}'"
        return ""

    def _describe(self, host: ContractSurface, factory: MemberDescriptor) -> str:
        key = factory.parameters[0].name
        lines = [f"Shared {host.name} instances keyed by ``{key}``, created by {host.name}.{factory.name}."]
        detail = []
        if self.options.eviction is Eviction.LRU:
            detail.append(
                f"Holds at most {self.options.capacity} instances; the least recently used one is evicted first."
            )
        elif self.options.capacity:
            detail.append(
                f"Holds at most {self.options.capacity} instances; later keys are created but not cached."
            )
        if self.options.threading is Threading.LOCKING:
            detail.append("Safe for concurrent use.")
        else:
            detail.append("Not safe for concurrent use.")
        return "\n\n".join(lines + [" ".join(detail)])

    def _guarded(self, w: SourceWriter, locking: bool, body: List[str]) -> None:
        if locking:
            with w.block("with self._lock:"):
                w.lines(body)
        else:
            w.lines(body)

    def _write_get(
        self,
        w: SourceWriter,
        host: ContractSurface,
        factory: MemberDescriptor,
        name: str,
        key_type: TypeRef,
        locking: bool,
    ) -> None:
        capacity = self.options.capacity
        body = ["if key in self._items:"]
        if self.options.eviction is Eviction.LRU:
            body += ["    self._items.move_to_end(key)"]
        body += ["    return self._items[key]", f"value = {host.name}.{factory.name}(key)"]
        if self.options.eviction is Eviction.LRU:
            body += [
                "self._items[key] = value",
                f"if len(self._items) > {capacity}:",
                "    self._items.popitem(last=False)",
            ]
        elif capacity:
            body += [f"if len(self._items) < {capacity}:", "    self._items[key] = value"]
        else:
            body += ["self._items[key] = value"]
        body += ["return value"]
        with w.block(f"def {name}(self, key: {annotation(key_type)}) -> {host.name}:"):
            w.docstring("Return the shared instance for ``key``, creating it on first use.")
            self._guarded(w, locking, body)

    def _write_try_get(
        self, w: SourceWriter, host: ContractSurface, name: str, key_type: TypeRef, locking: bool
    ) -> None:
        body = ["return self._items.get(key)"]
        with w.block(f"def {name}(self, key: {annotation(key_type)}) -> Optional[{host.name}]:"):
            w.docstring("Return the cached instance for ``key`` without creating one.")
            self._guarded(w, locking, body)


__all__ = ["FlyweightGenerator"]
