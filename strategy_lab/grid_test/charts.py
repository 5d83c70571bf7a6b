"""Comparison chart for scorecard results."""
from pathlib import Path
from typing import Union

import numpy as np

from .scorecard import ScorecardResult


def generate_comparison_chart(
    result: ScorecardResult,
    output_path: Union[str, Path],
    top_n: int = 15,
) -> str:
    """
    Bar charts of the top ranked combinations: success rate, average return,
    outcome mix and composite score.

    Returns:
        Path to the generated chart ("" when nothing is ranked)
    """
    import matplotlib
    matplotlib.use('Agg')  # Non-interactive backend
    import matplotlib.pyplot as plt

    indices = list(result.ranking[:top_n])
    if not indices:
        return ""
    entries = [result.entries[i] for i in indices]
    labels = [f"#{rank} {e.selector.name[:14]}/{e.signal_generator.name[:10]}"
              for rank, e in enumerate(entries, start=1)]
    x = np.arange(len(entries))

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    title = 'Scorecard Comparison'
    if len(result.ranking) > top_n:
        title += f' (Top {top_n} of {len(result.ranking)})'
    fig.suptitle(title, fontsize=14, fontweight='bold')

    ax1 = axes[0, 0]
    ax1.bar(x, [e.metrics.success_rate * 100 for e in entries], color='steelblue', alpha=0.7)
    ax1.axhline(y=50, color='gray', linestyle='--', alpha=0.5, label='50% baseline')
    ax1.set_ylabel('Success Rate (%)')
    ax1.set_title('Success Rate by Combination')
    ax1.legend()

    ax2 = axes[0, 1]
    avg_returns = [e.metrics.avg_return * 100 for e in entries]
    ax2.bar(x, avg_returns, color=['green' if r > 0 else 'indianred' for r in avg_returns], alpha=0.7)
    ax2.axhline(y=0, color='black', linewidth=1)
    ax2.set_ylabel('Average Return (%)')
    ax2.set_title('Average Return per Trade')

    ax3 = axes[1, 0]
    width = 0.25
    ax3.bar(x - width, [e.metrics.target_hit_rate * 100 for e in entries], width,
            label='Target hit', color='green', alpha=0.7)
    ax3.bar(x, [e.metrics.stop_loss_rate * 100 for e in entries], width,
            label='Stop loss', color='red', alpha=0.7)
    ax3.bar(x + width, [e.metrics.timeout_rate * 100 for e in entries], width,
            label='Timeout', color='gray', alpha=0.7)
    ax3.set_ylabel('Share of Trades (%)')
    ax3.set_title('Outcome Mix')
    ax3.legend()

    ax4 = axes[1, 1]
    ax4.bar(x, [e.score for e in entries], color='darkorange', alpha=0.7)
    ax4.set_ylabel('Composite Score')
    ax4.set_title('Composite Score')

    for ax in axes.flat:
        ax.set_xticks(x)
        ax.set_xticklabels(labels, rotation=45, ha='right', fontsize=7)

    plt.tight_layout(rect=[0, 0.03, 1, 0.95])
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return str(output_path)
