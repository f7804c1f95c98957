"""
Collision-term configuration.

Reads the ``Collision_Term`` section of a YAML run configuration (plus
``General: Testparticles``) into plain attribute objects. Defaults match the
documented defaults of the transport code.

Example YAML:

    General:
        Testparticles: 1
    Collision_Term:
        Collision_Criterion: "Geometric"
        Elastic_Cross_Section: -1.0
        Isotropic: False
        Two_to_One: True
        Included_2to2: ["Elastic", "NN_to_NR"]
        Elastic_NN_Cutoff_Sqrts: 1.98
        Strings: True
        String_Parameters:
            Formation_Time: 1.0
"""

import numbers
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import yaml

from scatter_mc.errors import ConfigurationError
from scatter_mc.physics.criterion import CollisionCriterion


class StringParameters:
    """Subset of the string-fragmentation parameters used by the finder."""

    # YAML key -> (attribute, default)
    KEYS = {
        'Formation_Time': ('formation_time', 1.0),
        'String_Tension': ('string_tension', 1.0),
        'Form_Time_Factor': ('form_time_factor', 1.0),
        'Power_Particle_Formation': ('power_particle_formation', 2.0),
    }

    def __init__(self, formation_time: float = 1.0, string_tension: float = 1.0,
                 form_time_factor: float = 1.0,
                 power_particle_formation: float = 2.0):
        """
        Parameters:
            formation_time: Formation time of string fragments [fm]
            string_tension: String tension kappa [GeV/fm]
            form_time_factor: Factor applied to fragment formation times
            power_particle_formation: Growth power of the cross-section
                scaling factor (<= 0 means a step at formation time)
        """
        formation_time = _as_float('Formation_Time', formation_time)
        string_tension = _as_float('String_Tension', string_tension)
        form_time_factor = _as_float('Form_Time_Factor', form_time_factor)
        power_particle_formation = _as_float('Power_Particle_Formation',
                                             power_particle_formation)
        if formation_time < 0:
            raise ConfigurationError(
                f"Formation_Time must be non-negative, got {formation_time}")
        if string_tension <= 0:
            raise ConfigurationError(
                f"String_Tension must be positive, got {string_tension}")
        self.formation_time = formation_time
        self.string_tension = string_tension
        self.form_time_factor = form_time_factor
        self.power_particle_formation = power_particle_formation

    @classmethod
    def from_dict(cls, section: Optional[Mapping[str, Any]]) -> "StringParameters":
        kwargs = _take_keys(section or {}, cls.KEYS, 'String_Parameters')
        return cls(**kwargs)

    def __repr__(self) -> str:
        return (f"StringParameters(formation_time={self.formation_time}, "
                f"string_tension={self.string_tension})")


class CollisionTermConfig:
    """
    Configuration of the collision term.

    Usage:
        config = CollisionTermConfig.from_yaml('config.yaml')
        finder = ScatterActionsFinder(config, CrossSections(catalog, config))
    """

    # All tabulated 2->2 reaction families understood by the cross sections.
    ALL_2TO2 = frozenset({
        'Elastic', 'NN_to_NR', 'NN_to_DR', 'KN_to_KN', 'KN_to_KDelta',
        'Strangeness_exchange',
    })

    KEYS = {
        'Collision_Criterion': ('collision_criterion', 'Geometric'),
        'Elastic_Cross_Section': ('elastic_cross_section', -1.0),
        'Isotropic': ('isotropic', False),
        'Two_to_One': ('two_to_one', True),
        'Included_2to2': ('included_2to2', None),
        'Elastic_NN_Cutoff_Sqrts': ('elastic_nn_cutoff_sqrts', 1.98),
        'Strings': ('strings', True),
        'String_Threshold_Sqrts': ('string_threshold_sqrts', 4.0),
    }

    def __init__(self,
                 collision_criterion: Union[str, CollisionCriterion] = 'Geometric',
                 elastic_cross_section: float = -1.0,
                 isotropic: bool = False,
                 two_to_one: bool = True,
                 included_2to2: Optional[Iterable[str]] = None,
                 elastic_nn_cutoff_sqrts: float = 1.98,
                 strings: bool = True,
                 string_threshold_sqrts: float = 4.0,
                 testparticles: int = 1,
                 string_parameters: Optional[StringParameters] = None):
        """
        Parameters:
            collision_criterion: 'Geometric', 'Stochastic' or 'Covariant'
            elastic_cross_section: Constant elastic cross section [mb];
                negative means use the parametrization
            isotropic: Perform all collisions isotropically
            two_to_one: Enable resonance formation (2->1)
            included_2to2: Names of enabled 2->2 reaction families
                (None enables all)
            elastic_nn_cutoff_sqrts: No NN elastic scattering below this
                sqrt(s) [GeV]
            strings: Enable string excitation
            string_threshold_sqrts: sqrt(s) above which strings open [GeV]
            testparticles: Oversampling factor (>= 1)
            string_parameters: String fragmentation parameters
        """
        if isinstance(collision_criterion, CollisionCriterion):
            self.collision_criterion = collision_criterion
        else:
            self.collision_criterion = CollisionCriterion.from_string(
                collision_criterion)

        if (isinstance(testparticles, bool)
                or not isinstance(testparticles, numbers.Real)
                or int(testparticles) != testparticles or testparticles < 1):
            raise ConfigurationError(
                f"Testparticles must be a positive integer, got {testparticles}")

        if included_2to2 is None:
            included = set(self.ALL_2TO2)
        elif isinstance(included_2to2, str):
            raise ConfigurationError(
                f"Included_2to2 must be a list of names, got {included_2to2!r}")
        else:
            included = set(included_2to2)
            unknown = included - self.ALL_2TO2
            if unknown:
                raise ConfigurationError(
                    f"Unknown Included_2to2 entries {sorted(unknown)}. "
                    f"Available: {sorted(self.ALL_2TO2)}")

        self.elastic_cross_section = _as_float('Elastic_Cross_Section', elastic_cross_section)
        self.isotropic = _as_bool('Isotropic', isotropic)
        self.two_to_one = _as_bool('Two_to_One', two_to_one)
        self.included_2to2 = frozenset(included)
        self.elastic_nn_cutoff_sqrts = _as_float('Elastic_NN_Cutoff_Sqrts',
                                                 elastic_nn_cutoff_sqrts)
        self.strings = _as_bool('Strings', strings)
        self.string_threshold_sqrts = _as_float('String_Threshold_Sqrts',
                                                string_threshold_sqrts)
        self.testparticles = int(testparticles)
        self.string_parameters = string_parameters or StringParameters()

    @property
    def is_constant_elastic_isotropic(self) -> bool:
        """Constant isotropic elastic mode (used as maximal cross section)."""
        return self.isotropic and self.elastic_cross_section > 0.0

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "CollisionTermConfig":
        """
        Build from a full run configuration mapping.

        Only the ``General: Testparticles`` key and the ``Collision_Term``
        section are read; other sections are ignored.
        """
        if not isinstance(config, Mapping):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(config).__name__}")

        general = config.get('General') or {}
        term = dict(config.get('Collision_Term') or {})
        strings_section = term.pop('String_Parameters', None)

        kwargs = _take_keys(term, cls.KEYS, 'Collision_Term')
        kwargs['testparticles'] = general.get('Testparticles', 1)
        kwargs['string_parameters'] = StringParameters.from_dict(strings_section)
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "CollisionTermConfig":
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (f"CollisionTermConfig(criterion={self.collision_criterion.value}, "
                f"elastic={self.elastic_cross_section} mb, "
                f"testparticles={self.testparticles}, strings={self.strings})")


def _take_keys(section: Mapping[str, Any], keys: Mapping[str, tuple],
               section_name: str) -> dict:
    """Translate YAML keys to keyword arguments, rejecting unknown keys."""
    unknown = set(section) - set(keys)
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in {section_name}: {sorted(unknown)}")
    kwargs = {}
    for key, (attribute, default) in keys.items():
        kwargs[attribute] = section.get(key, default)
    return kwargs


def _as_bool(key: str, value: Any) -> bool:
    # bool('false') is True, so quoted YAML booleans must not get through
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"{key} must be true or false, got {value!r}")
    return value


def _as_float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    return float(value)
