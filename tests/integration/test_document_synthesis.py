"""Contract document -> engine -> generated module, executed in-process."""
from __future__ import annotations

import textwrap

from helpers.builders import install_module, load_artifact

DOCUMENT = textwrap.dedent(
    """
    contracts:
      IStorage:
        namespace: shop.io
        members:
          - {name: get, returns: bytes, parameters: [{name: key, type: str}]}
          - {name: flush}
      OrderService:
        namespace: shop.orders
        variant: concrete
        members:
          - name: audit
            role: step
            rank: 10
            returns: str
            parameters: [{name: request, type: str}, {name: next, type: "Callable[[str], str]"}]
          - name: validate
            role: step
            rank: 5
            returns: str
            parameters: [{name: request, type: str}, {name: next, type: "Callable[[str], str]"}]
          - {name: place, role: terminal, returns: str, parameters: [{name: request, type: str}]}
    syntheses:
      - {pattern: proxy, contract: IStorage, options: {interceptor_mode: single}}
      - {pattern: composer, contract: OrderService}
    """
)


class IStorage:
    pass


class MemoryStorage(IStorage):
    def __init__(self) -> None:
        self.flushed = 0

    def get(self, key):
        return key.encode()

    def flush(self):
        self.flushed += 1


def _outcomes():
    from patternsmith.core.engine import SynthesisEngine
    from patternsmith.core.loader import parse_document

    document = parse_document(DOCUMENT, "shop.yaml")
    engine = SynthesisEngine(config={"synthesis": {}, "output": {"header": "# generated"}})
    return engine.synthesize_all(document.requests)


class TestDocumentSynthesis:
    def test_every_request_succeeds(self) -> None:
        proxy, composer = _outcomes()

        assert proxy.succeeded and composer.succeeded
        assert [a.name for a in proxy.artifacts] == ["storage_proxy.py"]
        assert [a.name for a in composer.artifacts] == ["order_service_composer.py"]

    def test_generated_proxy_runs(self, monkeypatch) -> None:
        install_module(monkeypatch, "shop.io", IStorage=IStorage)
        proxy, _ = _outcomes()
        module = load_artifact(monkeypatch, proxy.artifacts[0], "shop.io.storage_proxy")
        seen = []

        class Recorder(module.StorageInterceptor):
            def before(self, context):
                seen.append((context.member, dict(context.arguments)))

        inner = MemoryStorage()
        storage = module.StorageProxy(inner, Recorder())

        assert storage.get("k") == b"k"
        storage.flush()
        assert inner.flushed == 1
        assert seen == [("get", {"key": "k"}), ("flush", {})]

    def test_generated_composer_runs(self, monkeypatch) -> None:
        _, composer = _outcomes()
        module = load_artifact(monkeypatch, composer.artifacts[0], "shop.orders.order_service_composer")

        class OrderService(module.OrderServiceComposer):
            def validate(self, request, next):
                return next(request.strip())

            def audit(self, request, next):
                return next(request) + "!"

            def place(self, request):
                return f"placed {request}"

        assert OrderService().invoke(" x ") == "placed x!"

    def test_outputs_are_stable_across_runs(self) -> None:
        first = [o.artifacts for o in _outcomes()]
        second = [o.artifacts for o in _outcomes()]

        assert first == second
