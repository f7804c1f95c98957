"""
Decay trees for exclusive final-state cross sections.

A tree starts at a two-body collision (root weight = total cross section),
branches into the collision channels (weight = partial cross section) and
then into every decay of every unstable particle in the current state
(weight = branching ratio). Multiplying weights from the first channel down
to a leaf gives the exclusive cross section of that leaf's fully stable
final state.

Nodes are stored in a flat arena owned by the tree and refer to their
children by index, so deep cascades are built and walked without recursion.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from scatter_mc.core.catalog import DecayBranch, ParticleType


@dataclass
class FinalStateCrossSection:
    """Exclusive cross section of one final state."""

    name: str
    cross_section: float  # mb
    mass: float  # total final-state pole mass [GeV]


@dataclass
class DecayNode:
    """One action (collision channel or 1->n decay) in a decay tree."""

    name: str
    weight: float
    initial_particles: Tuple[ParticleType, ...]
    final_particles: Tuple[ParticleType, ...]
    state: Tuple[ParticleType, ...]
    children: List[int] = field(default_factory=list)

    @property
    def state_name(self) -> str:
        return ''.join(p.name for p in self.state)

    @property
    def state_mass(self) -> float:
        return sum(p.mass for p in self.state)


def make_decay_name(resonance: ParticleType, decay: DecayBranch) -> str:
    """'[R->AB]' label of a decay."""
    return '[' + resonance.name + '->' + ''.join(p.name for p in decay.particle_types) + ']'


class DecayTree:
    """
    Arena of DecayNodes rooted at a two-body collision.

    Usage:
        tree = DecayTree.from_channels(a, b, total, channels, sqrts)
        final = deduplicate(tree.final_state_cross_sections())
    """

    ROOT = 0

    def __init__(self, name: str, weight: float,
                 initial_particles: Sequence[ParticleType],
                 final_particles: Sequence[ParticleType],
                 state: Sequence[ParticleType]):
        self.nodes: List[DecayNode] = [
            DecayNode(name, weight, tuple(initial_particles),
                      tuple(final_particles), tuple(state))
        ]

    @property
    def root(self) -> DecayNode:
        return self.nodes[self.ROOT]

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> DecayNode:
        return self.nodes[index]

    def add_action(self, parent: int, name: str, weight: float,
                   initial_particles: Sequence[ParticleType],
                   final_particles: Sequence[ParticleType]) -> int:
        """
        Append a child to node `parent`.

        The child's state is the parent's state with the initial particles
        replaced by the final particles, sorted by name.

        Returns:
            Index of the new node
        """
        state = list(self.nodes[parent].state)
        for p in initial_particles:
            state.remove(p)
        state.extend(final_particles)
        state.sort(key=lambda p: p.name)

        self.nodes.append(DecayNode(name, weight, tuple(initial_particles),
                                    tuple(final_particles), tuple(state)))
        index = len(self.nodes) - 1
        self.nodes[parent].children.append(index)
        return index

    def add_decays(self, start: int, sqrts: float):
        """
        Cascade every unstable particle below node `start`.

        A decay is open if its products fit into sqrt(s) minus the pole
        masses of all other particles in the state. Branch weights are
        divided by the number of unstable particles in the state, which
        compensates for the different orderings of the same decays (exact
        for up to two unstable particles, approximate beyond).

        If an unstable particle has no open decay (its width at the pole
        mass is not a valid assumption there) the node weight is set to
        zero and its subtree is not expanded further.
        """
        stack = [start]
        while stack:
            index = stack.pop()
            node = self.nodes[index]

            n_unstable = sum(1 for p in node.state if not p.is_stable)
            sqrts_minus_masses = sqrts - node.state_mass
            norm = 1.0 / n_unstable if n_unstable else 1.0

            new_children = []
            for ptype in node.state:
                if ptype.is_stable:
                    continue
                sqrts_decay = sqrts_minus_masses + ptype.mass
                can_decay = False
                for decay in ptype.decay_modes:
                    if decay.final_state_mass > sqrts_decay:
                        continue
                    can_decay = True
                    new_children.append(self.add_action(
                        index, make_decay_name(ptype, decay),
                        norm * decay.weight, (ptype,), decay.particle_types))
                if not can_decay:
                    node.weight = 0.0
                    new_children = []
                    break
            stack.extend(reversed(new_children))

    def final_state_cross_sections(self, show_intermediate_states: bool = False
                                   ) -> List[FinalStateCrossSection]:
        """
        Flatten the tree into one record per leaf.

        The root weight is the total cross section and is skipped; every
        other weight along the path is multiplied in.

        Parameters:
            show_intermediate_states: Name leaves by the full path
                ('AB{AB}->[R->CD]{CD}') instead of the final state only
        """
        result = []
        stack = [(self.ROOT, 0, '', 1.0)]
        while stack:
            index, depth, name, weight = stack.pop()
            node = self.nodes[index]
            if depth > 0:
                weight *= node.weight

            if show_intermediate_states:
                new_name = (name + '->' if name else '') + node.name
                new_name += '{' + node.state_name + '}'
            else:
                new_name = node.state_name

            if not node.children:
                result.append(FinalStateCrossSection(new_name, weight,
                                                     node.state_mass))
                continue
            for child in reversed(node.children):
                stack.append((child, depth + 1, new_name, weight))
        return result

    def format(self) -> str:
        """Indented 'name weight' listing of the whole tree."""
        lines = []
        stack = [(self.ROOT, 0)]
        while stack:
            index, depth = stack.pop()
            node = self.nodes[index]
            lines.append(' ' * depth + f"{node.name} {node.weight:g}")
            stack.extend((child, depth + 1) for child in reversed(node.children))
        return '\n'.join(lines)

    @classmethod
    def from_channels(cls, type_a: ParticleType, type_b: ParticleType,
                      total_cross_section: float, channels, sqrts: float) -> "DecayTree":
        """
        Build and fully expand the tree of a collision.

        Parameters:
            type_a, type_b: Incoming types
            total_cross_section: Total cross section [mb] (root weight)
            channels: CollisionBranches of the collision
            sqrts: Centre-of-mass energy [GeV]
        """
        incoming = (type_a, type_b)
        tree = cls(type_a.name + type_b.name, total_cross_section,
                   incoming, incoming, incoming)
        for channel in channels:
            if channel.weight <= 0.0:
                continue
            child = tree.add_action(cls.ROOT, channel.description, channel.weight,
                                    incoming, channel.particle_types)
            tree.add_decays(child, sqrts)
        return tree


def deduplicate(final_state_xs: Sequence[FinalStateCrossSection]
                ) -> List[FinalStateCrossSection]:
    """
    Merge records with identical names by summing, drop zero weights.

    Returns:
        New list sorted by name
    """
    merged: List[FinalStateCrossSection] = []
    for record in sorted(final_state_xs, key=lambda r: r.name):
        if merged and merged[-1].name == record.name:
            merged[-1].cross_section += record.cross_section
        else:
            merged.append(FinalStateCrossSection(record.name, record.cross_section,
                                                 record.mass))
    return [r for r in merged if r.cross_section != 0.0]
