import pytest

from reifykit.dispatch import MAX_REIFY_VALUE, HasModulus, Modular, reify, reify_const


def test_reify_zero():
    assert reify_const(0, lambda m: m.modulus()) == 0


def test_reify_max():
    assert reify_const(255, lambda m: m.modulus()) == 255


@pytest.mark.parametrize("v", [1, 17, 42, 100, 200, 255])
def test_reify_arbitrary(v):
    assert reify_const(v, lambda m: m.modulus()) == v


def test_reify_out_of_range():
    with pytest.raises(ValueError, match="out of supported range"):
        reify_const(256, lambda m: m.modulus())


def test_reify_negative_out_of_range():
    with pytest.raises(ValueError, match="out of supported range"):
        reify_const(-1, lambda m: m.modulus())


def test_reify_rejects_non_int():
    with pytest.raises(TypeError):
        reify_const("7", lambda m: m.modulus())


def test_reify_macro():
    assert reify(42, lambda m: m.modulus()) == 42


def test_reify_returns_value():
    assert reify_const(21, lambda m: m.modulus() * 2) == 42


def test_reify_all_values():
    for v in range(MAX_REIFY_VALUE + 1):
        assert reify_const(v, lambda m: m.modulus()) == v


def test_reify_passes_has_modulus():
    assert reify_const(17, lambda m: isinstance(m, HasModulus)) is True


def test_modular_reports_modulus():
    assert Modular(42).modulus() == 42


def test_trait_objects_have_consistent_behavior():
    objects = [Modular(n) for n in range(1, 9)]
    for i, obj in enumerate(objects):
        assert obj.modulus() == i + 1


def test_different_const_values_produce_different_behaviour():
    a: HasModulus = Modular(10)
    b: HasModulus = Modular(20)
    assert a.modulus() != b.modulus()
    assert a.modulus() == 10
    assert b.modulus() == 20


def test_modular_equality_by_value():
    assert Modular(7) == Modular(7)
    assert Modular(7) != Modular(8)


def test_modular_rejects_out_of_u64():
    with pytest.raises(ValueError):
        Modular(2**64)
    with pytest.raises(ValueError):
        Modular(-1)


def test_has_modulus_is_abstract():
    with pytest.raises(TypeError):
        HasModulus()