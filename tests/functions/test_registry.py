from __future__ import annotations

from dataclasses import dataclass
import threading

import pytest

from pagebind.errors import FunctionCallError, FunctionNotFoundError, InvalidFunctionSignatureError
from pagebind.fields import bind
from pagebind.functions import (
    FunctionOrigin,
    FunctionRegistry,
    ResolvedFunction,
    consumes_node_set,
    default_registry,
    find_method,
    invoke,
    node_set_function,
    resolve_function,
)
from pagebind.selection import Selection


def _node() -> Selection:
    return Selection.from_html("<p id='x'>hello</p>").find("p")


def _registry_greet(node: Selection, *args: str) -> str:
    return "registry:" + node.text()


@dataclass
class Root:
    def greet(self, node: Selection, *args: str) -> str:
        return "root:" + node.text()


@dataclass
class Middle:
    def greet(self, node: Selection, *args: str) -> str:
        return "middle:" + node.text()


@dataclass
class Plain:
    name: str = bind("->text()", default="")


@dataclass
class Leaf:
    def greet(self, node: Selection, *args: str) -> str:
        return "leaf:" + node.text()

    def SnakeLookup(self, node: Selection, *args: str) -> str:
        return "camel"

    def snake_lookup(self, node: Selection, *args: str) -> str:
        return "snake"

    def listify(self, node: Selection, *args: str) -> str:
        return ",".join(args)


class Dispatching:
    def __init__(self) -> None:
        self.asked: list[str] = []

    def resolve_method(self, name: str):
        self.asked.append(name)
        if name == "greet":
            return lambda node, *args: "dispatched"
        return None

    def greet(self, node: Selection, *args: str) -> str:
        return "never used"


def _resolve(name: str, record: object, ancestors: list[object], registry: FunctionRegistry) -> object:
    return invoke(resolve_function(name, record, ancestors, registry), _node(), [])


def test_resolution_precedence_record_then_ancestors_then_registry() -> None:
    registry = FunctionRegistry({"greet": _registry_greet})
    ancestors = [Root(), Middle()]

    assert _resolve("greet", Leaf(), ancestors, registry) == "leaf:hello"
    assert _resolve("greet", Plain(), ancestors, registry) == "middle:hello"
    assert _resolve("greet", Plain(), [Root(), Plain()], registry) == "root:hello"
    assert _resolve("greet", Plain(), [Plain()], registry) == "registry:hello"

    with pytest.raises(FunctionNotFoundError, match="greet"):
        resolve_function("greet", Plain(), [], FunctionRegistry())


def test_resolution_reports_origin() -> None:
    registry = FunctionRegistry({"greet": _registry_greet})

    assert resolve_function("greet", Leaf(), [], registry).origin is FunctionOrigin.RECORD
    assert resolve_function("greet", Plain(), [Root()], registry).origin is FunctionOrigin.ANCESTOR
    assert resolve_function("greet", Plain(), [], registry).origin is FunctionOrigin.REGISTRY


def test_find_method_prefers_exact_name_then_snake_case() -> None:
    leaf = Leaf()

    assert find_method(leaf, "SnakeLookup")(_node()) == "camel"
    assert find_method(leaf, "snakeLookup")(_node()) == "snake"
    assert find_method(leaf, "missing") is None
    assert find_method(Plain(), "name") is None
    assert find_method(Plain(), "__repr__") is None


def test_dispatchable_records_answer_for_themselves() -> None:
    record = Dispatching()

    assert find_method(record, "greet")(_node()) == "dispatched"
    assert find_method(record, "other") is None
    assert record.asked == ["greet", "other"]


def test_invoke_passes_arguments_and_unwraps_value_error_pairs() -> None:
    resolved = resolve_function("listify", Leaf(), [], FunctionRegistry())
    assert invoke(resolved, _node(), ["a", "b"]) == "a,b"

    pair_ok = ResolvedFunction("pair", lambda node, *args: ("value", None), FunctionOrigin.REGISTRY)
    assert invoke(pair_ok, _node(), []) == "value"

    failure = ValueError("boom")
    pair_err = ResolvedFunction("pair", lambda node, *args: ("ignored", failure), FunctionOrigin.REGISTRY)
    with pytest.raises(FunctionCallError) as excinfo:
        invoke(pair_err, _node(), [])
    assert excinfo.value.cause is failure

    data = ResolvedFunction("data", lambda node, *args: ("a", "b"), FunctionOrigin.REGISTRY)
    assert invoke(data, _node(), []) == ("a", "b")


def test_invoke_wraps_raised_errors() -> None:
    def broken(node: Selection, *args: str) -> str:
        raise RuntimeError("exploded")

    with pytest.raises(FunctionCallError, match="exploded") as excinfo:
        invoke(ResolvedFunction("broken", broken, FunctionOrigin.REGISTRY), _node(), [])
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_invoke_rejects_empty_results_and_unusable_signatures() -> None:
    empty = ResolvedFunction("empty", lambda node, *args: (), FunctionOrigin.REGISTRY)
    with pytest.raises(InvalidFunctionSignatureError, match="no value"):
        invoke(empty, _node(), [])

    no_node = ResolvedFunction("noNode", lambda: "x", FunctionOrigin.REGISTRY)
    with pytest.raises(InvalidFunctionSignatureError):
        invoke(no_node, _node(), [])

    one_arg = ResolvedFunction("oneArg", lambda node, first: first, FunctionOrigin.REGISTRY)
    assert invoke(one_arg, _node(), ["only"]) == "only"
    with pytest.raises(InvalidFunctionSignatureError):
        invoke(one_arg, _node(), ["a", "b"])


def test_registry_register_replace_and_unregister() -> None:
    registry = default_registry()
    assert "text" in registry
    assert "parentsUntil" in registry.names()

    registry.register("text", lambda node, *args: "overridden")
    assert registry.get("text")(_node()) == "overridden"  # type: ignore[misc]

    assert registry.unregister("text") is True
    assert registry.unregister("text") is False
    assert registry.get("text") is None

    with pytest.raises(ValueError):
        registry.register("", _registry_greet)
    with pytest.raises(ValueError):
        registry.register("bad", "not callable")  # type: ignore[arg-type]


def test_registry_concurrent_registration_and_lookup() -> None:
    registry = FunctionRegistry()
    errors: list[BaseException] = []

    def writer(index: int) -> None:
        for round_no in range(200):
            registry.register(f"fn{round_no % 10}", lambda node, *args, i=index: i)

    def reader() -> None:
        for round_no in range(2000):
            function = registry.get(f"fn{round_no % 10}")
            if function is not None and not callable(function):
                errors.append(AssertionError("half-written entry"))

    threads = [threading.Thread(target=writer, args=(index,)) for index in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    assert len(registry) == 10


def test_bound_methods_are_checked_against_their_own_parameters() -> None:
    first = resolve_function("listify", Leaf(), [], FunctionRegistry())
    second = resolve_function("greet", Leaf(), [], FunctionRegistry())

    assert invoke(first, _node(), ["x"]) == "x"
    assert invoke(resolve_function("listify", Leaf(), [], FunctionRegistry()), _node(), []) == ""
    assert invoke(second, _node(), ["ignored"]) == "leaf:hello"

    def strict_method_owner() -> object:
        @dataclass
        class Owner:
            def single(self, node: Selection) -> str:
                return "single"

        return Owner()

    owner = strict_method_owner()
    resolved = resolve_function("single", owner, [], FunctionRegistry())
    assert invoke(resolved, _node(), []) == "single"
    with pytest.raises(InvalidFunctionSignatureError):
        invoke(resolved, _node(), ["extra"])


def test_node_set_marker_survives_method_binding() -> None:
    @node_set_function
    def whole(node: Selection, *args: str) -> int:
        return node.size()

    class Holder:
        @node_set_function
        def counted(self, node: Selection, *args: str) -> int:
            return node.size()

    assert consumes_node_set(whole)
    assert consumes_node_set(Holder().counted)
    assert not consumes_node_set(_registry_greet)
    assert consumes_node_set(default_registry().get("eachAttr"))  # type: ignore[arg-type]
    assert consumes_node_set(default_registry().get("last"))  # type: ignore[arg-type]
    assert not consumes_node_set(default_registry().get("attrEmpty"))  # type: ignore[arg-type]
