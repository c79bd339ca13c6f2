"""Unit tests for parameters and settings."""
import pytest

from bbo_engine.config import Parameters, Settings, layer_parameters
from bbo_engine.errors import ConfigurationError


def test_defaults():
    """Test default parameter values."""
    params = layer_parameters()

    assert params.num_dimensions is None
    assert params.search_range == (-10.0, 10.0)
    assert params.max_time is None
    assert params.max_func_evals is None
    assert params.max_steps == 10000
    assert params.min_delta_fitness_tolerance == 1e-50
    assert params.fitness_tolerance == 1e-8
    assert params.max_num_steps_without_func_evals == 100
    assert params.population_size == 50
    assert params.precision_ratio == 0.40
    assert params.precision_threshold == 1e-6
    assert params.inheritance_ratio == 0.30


def test_later_layers_override_only_present_keys():
    """Test layering precedence."""
    params = layer_parameters(
        {'MaxSteps': 5, 'PrecisionRatio': 0.2},
        {'MaxSteps': 50},
        {'max_time': 3}
    )

    assert params.max_steps == 50
    assert params.precision_ratio == 0.2
    assert params.max_time == 3.0


def test_layering_parameters_object_uses_explicit_values_only():
    """Test that a Parameters layer does not reset earlier layers to defaults."""
    user = Parameters(MaxTime=2.0)

    params = layer_parameters({'MaxSteps': 42}, user)

    assert params.max_steps == 42
    assert params.max_time == 2.0


def test_unknown_key_is_rejected():
    """Test that unknown options are an error."""
    with pytest.raises(ConfigurationError, match="NotAnOption"):
        layer_parameters({'NotAnOption': 1})


@pytest.mark.parametrize("key,value", [
    ('MaxTime', 0.0),
    ('MaxTime', -1.0),
    ('MaxFuncEvals', 0),
    ('MaxSteps', 0),
    ('PopulationSize', 1),
    ('NumDimensions', 0),
    ('InheritanceRatio', 0.0),
    ('PrecisionThreshold', 0.0),
])
def test_invalid_values(key, value):
    """Test budget and size validation."""
    with pytest.raises(ConfigurationError, match="Invalid parameters"):
        layer_parameters({key: value})


def test_search_range_forms():
    """Test single and per-dimension search ranges."""
    assert layer_parameters({'SearchRange': (0, 1)}).search_range == (0.0, 1.0)
    assert layer_parameters({'SearchRange': [-5, 5]}).search_range == (-5.0, 5.0)
    assert layer_parameters({'SearchRange': [(0, 1), (2, 4)]}).search_range == [(0.0, 1.0), (2.0, 4.0)]

    with pytest.raises(ConfigurationError, match="Invalid search range"):
        layer_parameters({'SearchRange': "wide"})
    with pytest.raises(ConfigurationError, match="Invalid search range"):
        layer_parameters({'SearchRange': [(0, 1, 2)]})


def test_parameters_are_frozen():
    """Test that parameters cannot be changed in place."""
    params = layer_parameters()
    with pytest.raises(ValueError):
        params.max_steps = 3

    updated = params.model_copy(update={'rng_seed': 99})
    assert updated.rng_seed == 99
    assert params.rng_seed == 1234


def test_to_dict_uses_option_names():
    """Test export with CamelCase keys."""
    d = layer_parameters({'MaxTime': 1.5}).to_dict()

    assert d['MaxTime'] == 1.5
    assert d['RngSeed'] == 1234
    assert 'max_time' not in d


def test_settings_from_environment(monkeypatch):
    """Test that settings read BBO_ prefixed variables."""
    monkeypatch.setenv('BBO_LOG_LEVEL', 'DEBUG')
    monkeypatch.setenv('BBO_MAX_STEPS_WARNING', '1000')

    s = Settings()

    assert s.log_level == 'DEBUG'
    assert s.max_steps_warning == 1000.0
    assert s.default_method == 'resampling_inheritance_memetic_search'
