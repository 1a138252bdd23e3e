from dataclasses import dataclass

import pytest

from bindery import (
    Binder,
    Box,
    DependencyCycleError,
    DependencyError,
    DuplicateRegistrationError,
    IllegalLazyNestingError,
    Lazy,
    MissingDependenciesError,
)


@dataclass
class A:
    x: int


@dataclass
class B:
    a: A
    x: int


@dataclass
class MissingDep:
    x: int


@dataclass
class StructWithoutDep:
    b: B
    a: A
    x: float
    missing: MissingDep


@dataclass
class DuplicateStruct:
    a: A


@dataclass
class CycleA:
    x: int
    start: "Box[CycleStart]"


@dataclass
class CycleB:
    a: CycleA
    x: int


@dataclass
class ShouldNotBeInErr:
    x: int


@dataclass
class CycleStart:
    b: CycleB
    a: CycleA
    x: float
    unrelated: ShouldNotBeInErr


@dataclass
class First:
    third: "Third"


@dataclass
class Second:
    first: First


@dataclass
class Third:
    second: Second


def test_error_on_duplicate():
    binder = Binder().instance(1).inject(A).inject(DuplicateStruct).inject(DuplicateStruct)

    with pytest.raises(DuplicateRegistrationError, match="Dependencies duplications found: ") as info:
        binder.build()

    assert len(info.value.types) == 1
    assert info.value.types[0].endswith("DuplicateStruct")


def test_error_on_instance_shadowed_by_injected_component():
    binder = Binder().instance(A(1)).instance(1).inject(A)

    with pytest.raises(DuplicateRegistrationError, match=r"test_validation\.A"):
        binder.build()


def test_error_on_missing_dependency():
    binder = Binder().inject(StructWithoutDep).inject(B).inject(A).instance(1).instance(2.0)

    with pytest.raises(MissingDependenciesError) as info:
        binder.build()

    message = str(info.value)
    assert message.startswith("Missing injection values:\n")
    assert "StructWithoutDep" in message
    assert "test_validation.py:" in message
    assert "missing dependencies: " in message
    assert "MissingDep" in message

    [entry] = info.value.per_component
    assert entry.name.endswith("StructWithoutDep")
    assert [name.rsplit(".", 1)[-1] for name in entry.missing] == ["MissingDep"]


def test_missing_dependencies_are_reported_for_every_component():
    @dataclass
    class Other:
        missing: MissingDep
        value: str

    binder = Binder().inject(StructWithoutDep).inject(Other).instance(2.0)

    with pytest.raises(MissingDependenciesError) as info:
        binder.verify()

    names = [entry.name.rsplit(".", 1)[-1] for entry in info.value.per_component]
    assert names == ["StructWithoutDep", "Other"]
    assert len(info.value.per_component[1].missing) == 2


def test_error_on_missing_lazy_target():
    binder = Binder().inject(Lazy[MissingDep])

    with pytest.raises(MissingDependenciesError, match="MissingDep"):
        binder.build()


def test_error_on_nested_lazy():
    binder = Binder().instance(1).inject(A).inject(Lazy[A]).inject(Lazy[Lazy[A]])

    with pytest.raises(IllegalLazyNestingError, match="Nested lazy dependencies: ") as info:
        binder.build()

    assert len(info.value.types) == 1
    assert "Lazy[bindery.lazy.Lazy[" in info.value.types[0]
    assert "test_validation.A]]" in info.value.types[0]


def test_error_on_cycle_excludes_unrelated_components():
    binder = (
        Binder()
        .inject(CycleStart).auto_box()
        .inject(ShouldNotBeInErr)
        .inject(CycleB)
        .inject(CycleA)
        .instance(1)
        .instance(2.0)
    )

    with pytest.raises(DependencyCycleError, match=r"Dependencies cycle \(one or more\) found: ") as info:
        binder.build()

    message = str(info.value)
    assert "CycleStart" in message
    assert "CycleA" in message
    assert "CycleB" in message
    assert "ShouldNotBeInErr" not in message


def test_cycle_reports_remaining_types_in_registration_order():
    binder = Binder().inject(First).inject(Second).inject(Third).inject(A).instance(1)

    with pytest.raises(DependencyCycleError) as info:
        binder.verify()

    assert [name.rsplit(".", 1)[-1] for name in info.value.types] == ["First", "Second", "Third"]


@dataclass
class Parent:
    child: "Lazy[Child]"


@dataclass
class Child:
    parent: Parent


def test_lazy_dependency_breaks_a_cycle():
    registry = Binder().inject(Parent).inject(Lazy[Child]).inject(Child).build()

    assert registry.get(Parent).child.get().parent is registry.get(Parent)


def test_duplicates_are_reported_before_missing_dependencies():
    binder = Binder().inject(StructWithoutDep).inject(StructWithoutDep)

    with pytest.raises(DuplicateRegistrationError):
        binder.verify()


def test_verify_accepts_externally_known_types():
    binder = Binder().inject(B)

    with pytest.raises(MissingDependenciesError):
        binder.verify()

    binder.verify(extra_known=[A, int])


def test_short_names_in_reports():
    binder = Binder().inject(StructWithoutDep).inject(B).inject(A).instance(1).instance(2.0)

    with pytest.raises(MissingDependenciesError) as info:
        binder.verify(short_names=True)

    message = str(info.value)
    assert "for type StructWithoutDep\n" in message
    assert "missing dependencies: MissingDep\n" in message
    assert "test_validation.StructWithoutDep" not in message


def test_short_names_in_build():
    binder = Binder().inject(DuplicateStruct).inject(DuplicateStruct)

    with pytest.raises(DuplicateRegistrationError, match="^Dependencies duplications found: DuplicateStruct$"):
        binder.build(short_names=True)


def test_validation_failure_is_logged(caplog):
    binder = Binder().inject(B)

    with pytest.raises(MissingDependenciesError):
        binder.build()

    assert "Dependency validation failed" in caplog.text


def test_unannotated_constructor_parameter():
    class Unannotated:
        def __init__(self, thing):
            self.thing = thing

    with pytest.raises(DependencyError, match="Dependency <thing> of provider <.*Unannotated> is not annotated"):
        Binder().inject(Unannotated)


def test_non_class_cannot_be_injected():
    with pytest.raises(DependencyError, match="is not a class"):
        Binder().inject(42)
