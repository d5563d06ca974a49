import pytest

from getruth.config import PRESET_QUICK, PRESET_REFERENCE, EvolutionConfig
from getruth.utils.validation import ConfigurationError


def test_defaults_match_reference_preset():
    config = EvolutionConfig()
    reference = EvolutionConfig.from_dict(PRESET_REFERENCE)
    assert config.population_size == 50
    assert config.chromosome_length_multiplier == 25
    assert config.max_expansions == 50
    assert config.fitness_threshold == 0.05
    assert config.max_generations == 10000
    assert config.minimizing
    assert reference.to_dict() == config.to_dict()


def test_quick_preset_is_valid():
    config = EvolutionConfig.from_dict(PRESET_QUICK)
    assert config.max_generations == 200


def test_choice_fields_are_normalized():
    config = EvolutionConfig(selection="rank", crossover="uniform", mutation="int_flip",
                             optimize="maximize", expansion="left_to_right")
    assert config.selection == "RANK"
    assert config.crossover == "UNIFORM"
    assert config.mutation == "INT_FLIP"
    assert config.expansion == "LEFT_TO_RIGHT"
    assert not config.minimizing


@pytest.mark.parametrize(
    "changes, code",
    [
        ({"population_size": 0}, "invalid_population_size"),
        ({"max_generations": -1}, "invalid_max_generations"),
        ({"chromosome_length_multiplier": 0}, "invalid_chromosome_length_multiplier"),
        ({"max_expansions": 0}, "invalid_max_expansions"),
        ({"codon_bound": 0}, "invalid_codon_bound"),
        ({"crossover_rate": 1.5}, "invalid_crossover_rate"),
        ({"mutation_rate": -0.1}, "invalid_mutation_rate"),
        ({"elite_count": 50}, "invalid_elite_count"),
        ({"parallel_workers": -1}, "invalid_parallel_workers"),
        ({"selection": "lottery"}, "unknown_selection"),
        ({"crossover": "two_point"}, "unknown_crossover"),
        ({"optimize": "sideways"}, "unknown_optimize"),
        ({"fitness_threshold": float("inf")}, "invalid_fitness_threshold"),
        ({"fitness_threshold": -0.5}, "threshold_direction_mismatch"),
    ],
)
def test_invalid_configurations(changes, code):
    with pytest.raises(ConfigurationError) as info:
        EvolutionConfig(**changes)
    assert info.value.code == code


def test_negative_threshold_allowed_when_maximizing():
    config = EvolutionConfig(optimize="MAXIMIZE", fitness_threshold=-0.5)
    assert config.fitness_threshold == -0.5


def test_unknown_keys_are_rejected():
    with pytest.raises(ConfigurationError) as info:
        EvolutionConfig.from_dict({"population": 10})
    assert info.value.code == "unknown_config_keys"


def test_replace_revalidates():
    config = EvolutionConfig(seed=1)
    assert config.replace(population_size=10).population_size == 10
    with pytest.raises(ConfigurationError):
        config.replace(population_size=0)
