"""
Partial Cross Sections - Plot Example

Tabulates the partial and exclusive final-state cross sections of a pair
with the same tables the diagnostic dump writes, then plots them against
sqrt(s).

Expected results for pi+ p with the default catalog:
    - Delta++ formation peak at sqrt(s) ~ 1.23 GeV
    - Elastic background of ~6.7 mb above threshold
    - Final-state table collapses everything into p pi+
"""

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path
import argparse
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from scatter_mc.config import CollisionTermConfig
from scatter_mc.core.catalog import ParticleCatalog
from scatter_mc.physics.cross_sections import CrossSections
from scatter_mc.transport.dump import dump_cross_sections


def parse_table(text: str):
    """
    Read a dumped table back into arrays.

    Returns:
        sqrts: Energies [GeV]
        columns: Dict channel name -> cross sections [mb]
    """
    lines = [line for line in text.splitlines() if line.strip()]
    names = lines[1].split()[1:]
    data = np.array([[float(v) for v in line.split()] for line in lines[2:]])
    if data.size == 0:
        return np.array([]), {}
    return data[:, 0], {name: data[:, i + 1] for i, name in enumerate(names)}


def plot_table(sqrts, columns, title, save_path=None):
    """
    Plot each channel against sqrt(s).

    Parameters:
        sqrts: Energies [GeV]
        columns: Dict channel name -> cross sections [mb]
        title: Figure title
        save_path: Path to save figure (optional)
    """
    plt.figure(figsize=(10, 6))
    for name, xs in columns.items():
        style = 'k-' if name == 'total' else '-'
        plt.plot(sqrts, xs, style, linewidth=2.5 if name == 'total' else 1.5,
                 label=name)

    plt.xlabel(r'$\sqrt{s}$ [GeV]', fontsize=12)
    plt.ylabel('σ [mb]', fontsize=12)
    plt.title(title, fontsize=14, fontweight='bold')
    plt.grid(True, alpha=0.3)
    plt.legend(fontsize=9, ncol=2)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150)
        print(f"Plot saved: {save_path}")
    plt.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Plot partial cross sections")
    parser.add_argument('a', nargs='?', default='pi+')
    parser.add_argument('b', nargs='?', default='p')
    parser.add_argument('--config', help='YAML run configuration')
    parser.add_argument('--final-state', action='store_true',
                        help='Exclusive final states instead of channels')
    args = parser.parse_args()

    catalog = ParticleCatalog.default()
    config = (CollisionTermConfig.from_yaml(args.config) if args.config
              else CollisionTermConfig())
    xs = CrossSections(catalog, config)
    type_a, type_b = catalog[args.a], catalog[args.b]

    print(f"\n{'='*70}")
    print(f"Partial cross sections: {type_a.name} + {type_b.name}")
    print(f"{'='*70}\n")

    table = dump_cross_sections(xs, type_a, type_b, type_a.mass, type_b.mass,
                                final_state=args.final_state, verbose=True)
    print(table)

    sqrts, columns = parse_table(table)
    kind = 'final-state' if args.final_state else 'partial'
    plot_table(sqrts, columns, f"{type_a.name} + {type_b.name} {kind} cross sections",
               save_path=f"xs_{type_a.name}{type_b.name}_{kind}.png")
