"""Collision-term configuration loading."""

import pytest

from scatter_mc.config import CollisionTermConfig, StringParameters
from scatter_mc.errors import ConfigurationError
from scatter_mc.physics.criterion import CollisionCriterion


def test_defaults():
    config = CollisionTermConfig()
    assert config.collision_criterion is CollisionCriterion.GEOMETRIC
    assert config.elastic_cross_section == -1.0
    assert config.testparticles == 1
    assert config.included_2to2 == CollisionTermConfig.ALL_2TO2
    assert config.string_parameters.formation_time == 1.0
    assert not config.is_constant_elastic_isotropic


def test_from_dict():
    config = CollisionTermConfig.from_dict({
        'General': {'Testparticles': 5, 'End_Time': 100.0},
        'Collision_Term': {
            'Collision_Criterion': 'Stochastic',
            'Elastic_Cross_Section': 30.0,
            'Isotropic': True,
            'Included_2to2': ['Elastic'],
            'String_Parameters': {'Formation_Time': 2.5},
        },
        'Output': {'Particles': {'Format': ['Oscar2013']}},
    })
    assert config.collision_criterion is CollisionCriterion.STOCHASTIC
    assert config.testparticles == 5
    assert config.included_2to2 == frozenset({'Elastic'})
    assert config.string_parameters.formation_time == 2.5
    assert config.is_constant_elastic_isotropic


def test_unknown_key_rejected():
    with pytest.raises(ConfigurationError, match="Collision_Term"):
        CollisionTermConfig.from_dict({'Collision_Term': {'Colision_Criterion': 'Geometric'}})


def test_unknown_2to2_family_rejected():
    with pytest.raises(ConfigurationError, match="Included_2to2"):
        CollisionTermConfig(included_2to2=['Elastic', 'Magic'])


@pytest.mark.parametrize("testparticles", [0, -1, 1.5, True, 'two'])
def test_invalid_testparticles(testparticles):
    with pytest.raises(ConfigurationError):
        CollisionTermConfig(testparticles=testparticles)


@pytest.mark.parametrize("key", ['Isotropic', 'Two_to_One', 'Strings'])
@pytest.mark.parametrize("value", ["false", "False", "true", 0, 1])
def test_flags_must_be_booleans(key, value):
    with pytest.raises(ConfigurationError, match=key):
        CollisionTermConfig.from_dict({'Collision_Term': {key: value}})


@pytest.mark.parametrize("key", ['Elastic_Cross_Section', 'Elastic_NN_Cutoff_Sqrts',
                                 'String_Threshold_Sqrts'])
@pytest.mark.parametrize("value", ["forty", "40", True, None])
def test_numbers_must_be_numeric(key, value):
    with pytest.raises(ConfigurationError, match=key):
        CollisionTermConfig.from_dict({'Collision_Term': {key: value}})


def test_string_parameters_must_be_numeric():
    with pytest.raises(ConfigurationError, match="Formation_Time"):
        CollisionTermConfig.from_dict(
            {'Collision_Term': {'String_Parameters': {'Formation_Time': 'soon'}}})


def test_quoted_yaml_boolean_rejected(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text("Collision_Term:\n    Isotropic: \"false\"\n")
    with pytest.raises(ConfigurationError, match="Isotropic"):
        CollisionTermConfig.from_yaml(path)


def test_integer_numbers_accepted():
    config = CollisionTermConfig.from_dict({'Collision_Term': {'Elastic_Cross_Section': 40}})
    assert config.elastic_cross_section == 40.0
    assert isinstance(config.elastic_cross_section, float)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        StringParameters(formation_time=-1.0)


def test_from_yaml(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(
        "General:\n"
        "    Testparticles: 2\n"
        "Collision_Term:\n"
        "    Collision_Criterion: Covariant\n"
        "    Strings: False\n"
    )
    config = CollisionTermConfig.from_yaml(path)
    assert config.collision_criterion is CollisionCriterion.COVARIANT
    assert config.testparticles == 2
    assert not config.strings


def test_from_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        CollisionTermConfig.from_yaml(tmp_path / 'nope.yaml')
