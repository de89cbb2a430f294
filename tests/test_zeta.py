"""
Tests for item parameter handling.

Tests cover:
- Symbolic/semantic key conversion with pass-through keys
- Default filling
- Redundant and missing parameter validation
- Numeric coercion of string parameters
- The typed Zeta dataclass
"""

import pytest

from adaptive_cat.errors import UsageError, ZetaValidationError
from adaptive_cat.zeta import (
    ZETA_KEY_MAP,
    Zeta,
    as_zeta,
    convert_zeta,
    default_zeta,
    ensure_zeta_numeric_values,
    fill_zeta_defaults,
    validate_zeta_params,
)


class TestConvertZeta:
    """Key conversion between symbolic and semantic naming."""

    def test_symbolic_to_semantic(self):
        zeta = {"a": 1, "b": 2, "c": 3, "d": 4, "id": "x"}
        assert convert_zeta(zeta, "semantic") == {
            "discrimination": 1,
            "difficulty": 2,
            "guessing": 3,
            "slipping": 4,
            "id": "x",
        }

    def test_semantic_to_symbolic(self):
        zeta = {"discrimination": 1, "difficulty": 2, "word": "yes"}
        assert convert_zeta(zeta, "symbolic") == {"a": 1, "b": 2, "word": "yes"}

    def test_only_present_keys_are_remapped(self):
        assert convert_zeta({"b": 0.3}, "semantic") == {"difficulty": 0.3}

    @pytest.mark.parametrize("fmt", ["symbolic", "semantic"])
    def test_round_trip_preserves_values(self, fmt):
        zeta = {"a": 1.5, "difficulty": -0.2, "c": 0.1, "slipping": 0.9, "id": 7}
        assert convert_zeta(convert_zeta(zeta, "symbolic"), "semantic") == convert_zeta(
            zeta, "semantic"
        )
        assert convert_zeta(zeta, fmt)["id"] == 7

    def test_invalid_format_raises(self):
        with pytest.raises(UsageError, match="Invalid desired format"):
            convert_zeta({"a": 1}, "nonsense")


class TestDefaults:
    """Default parameters and default filling."""

    def test_default_zeta_symbolic(self):
        assert default_zeta() == {"a": 1.0, "b": 0.0, "c": 0.0, "d": 1.0}

    def test_default_zeta_semantic(self):
        assert default_zeta("semantic") == {
            "discrimination": 1.0,
            "difficulty": 0.0,
            "guessing": 0.0,
            "slipping": 1.0,
        }

    def test_fill_defaults_keeps_given_values(self):
        filled = fill_zeta_defaults({"difficulty": 2.0, "word": "hi"}, "symbolic")
        assert filled == {"a": 1.0, "b": 2.0, "c": 0.0, "d": 1.0, "word": "hi"}

    def test_fill_defaults_treats_none_as_missing(self):
        filled = fill_zeta_defaults({"a": None, "b": 1.0})
        assert filled["a"] == 1.0
        assert filled["b"] == 1.0

    def test_key_map_has_four_parameters(self):
        assert set(ZETA_KEY_MAP) == {"a", "b", "c", "d"}


class TestValidateZetaParams:
    """Redundant and missing parameter detection."""

    @pytest.mark.parametrize("symbol,name", list(ZETA_KEY_MAP.items()))
    def test_redundant_keys_raise(self, symbol, name):
        with pytest.raises(ZetaValidationError, match=f"`{symbol}` key and `{name}` key"):
            validate_zeta_params({symbol: 1, name: 1})

    def test_article_for_discrimination(self):
        with pytest.raises(ZetaValidationError, match="both an `a` key"):
            validate_zeta_params({"a": 1, "discrimination": 1})

    @pytest.mark.parametrize("symbol,name", list(ZETA_KEY_MAP.items()))
    def test_require_all_reports_missing_key(self, symbol, name):
        zeta = {k: 1 for k in ZETA_KEY_MAP if k != symbol}
        with pytest.raises(ZetaValidationError, match=f"missing the key `{symbol}` or `{name}`"):
            validate_zeta_params(zeta, require_all=True)

    def test_partial_zeta_allowed_without_require_all(self):
        validate_zeta_params({"a": 1})

    def test_mixed_naming_for_different_quantities_is_valid(self):
        validate_zeta_params(
            {"a": 1, "difficulty": 0, "c": 0, "slipping": 1}, require_all=True
        )


class TestEnsureNumericValues:
    """Coercion of string parameters."""

    def test_numeric_strings_become_floats(self):
        result = ensure_zeta_numeric_values({"a": "1.5", "difficulty": "-2", "id": "7"})
        assert result == {"a": 1.5, "difficulty": -2.0, "id": "7"}

    def test_input_not_mutated(self):
        zeta = {"a": "1.5"}
        ensure_zeta_numeric_values(zeta)
        assert zeta == {"a": "1.5"}

    def test_non_numeric_raises(self):
        with pytest.raises(ZetaValidationError, match="must be numeric"):
            ensure_zeta_numeric_values({"b": "hard"})

    def test_bool_rejected(self):
        with pytest.raises(ZetaValidationError):
            ensure_zeta_numeric_values({"a": True})


class TestZeta:
    """Typed parameter dataclass."""

    def test_defaults(self):
        zeta = Zeta()
        assert (zeta.a, zeta.b, zeta.c, zeta.d) == (1.0, 0.0, 0.0, 1.0)

    @pytest.mark.parametrize("fmt", ["symbolic", "semantic"])
    def test_from_dict_either_naming(self, fmt):
        record = convert_zeta({"a": 2, "b": -1, "c": 0.2, "d": 0.95}, fmt)
        assert Zeta.from_dict(record) == Zeta(2.0, -1.0, 0.2, 0.95)

    def test_from_dict_ignores_metadata(self):
        assert Zeta.from_dict({"b": "0.5", "word": "x"}) == Zeta(difficulty=0.5)

    def test_to_dict(self):
        assert Zeta(2.0, -1.0, 0.2, 0.95).to_dict("semantic") == {
            "discrimination": 2.0,
            "difficulty": -1.0,
            "guessing": 0.2,
            "slipping": 0.95,
        }

    def test_as_zeta_passes_instances_through(self):
        zeta = Zeta(difficulty=1.0)
        assert as_zeta(zeta) is zeta

    def test_as_zeta_require_all(self):
        with pytest.raises(ZetaValidationError):
            as_zeta({"a": 1}, require_all=True)
