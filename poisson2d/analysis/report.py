"""テキスト形式の解析レポート"""

from typing import Optional, Sequence

from .results import ConvergenceStudy, ErrorAnalysis, MethodComparison


def generate_report(
    analysis: ErrorAnalysis,
    study: Optional[ConvergenceStudy] = None,
    comparisons: Optional[Sequence[MethodComparison]] = None,
) -> str:
    """誤差解析の結果をプレーンテキストにまとめる

    Args:
        analysis: 誤差解析結果
        study: 収束調査の結果（省略可）
        comparisons: 解法比較の結果（省略可）

    Returns:
        レポート文字列
    """
    lines = ["=== ERROR ANALYSIS REPORT ===", "", "1. ERROR NORMS:"]
    if analysis.available:
        lines += [
            f"   - L2 error: {analysis.l2_error:.6e}",
            f"   - Max error: {analysis.max_error:.6e}",
            f"   - Mean error: {analysis.mean_error:.6e}",
            f"   - Points analyzed: {analysis.points_analyzed}",
        ]
    else:
        lines.append("   - Exact solution unavailable")
    lines.append("")

    section = 2
    if study is not None:
        lines += [
            f"{section}. CONVERGENCE ORDER ({study.test_case}, {study.method}):",
            f"   - L2 order: {study.l2_order:.2f}",
            f"   - Max order: {study.max_order:.2f}",
            f"   - Expected order: {study.expected_order:.1f} (finite differences)",
            "",
            f"{section + 1}. PER-MESH DETAIL:",
        ]
        for n, h, e_l2, e_max in zip(
            study.mesh_sizes, study.h_values, study.l2_errors, study.max_errors
        ):
            lines.append(
                f"   N = {n}, h = {h:.6f}, E_L2 = {e_l2:.6e}, E_max = {e_max:.6e}"
            )
        lines.append("")
        section += 2

    if comparisons:
        lines.append(f"{section}. METHOD COMPARISON:")
        for c in comparisons:
            error = f"{c.analysis.max_error:.3e}" if c.analysis.available else "n/a"
            lines.append(
                f"   - {c.method}: iterations = {c.result.iterations}, "
                f"time = {c.result.elapsed_time:.3f} s, converged = {c.result.converged}, "
                f"factor = {c.convergence_factor:.4f}, max error = {error}"
            )
        lines.append("")

    return "\n".join(lines)
