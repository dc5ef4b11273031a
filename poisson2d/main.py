import sys
import argparse
import time
from pathlib import Path
from typing import List, Optional

from .analysis import ErrorAnalyzer, generate_report
from .config import RunConfig
from .core import Mesh
from .logger import PoissonLogger
from .numerics.poisson import IterativeSolver, SolverMethod


def parse_args(argv: Optional[List[str]] = None):
    """コマンドライン引数をパース"""
    parser = argparse.ArgumentParser(description="2次元Poisson方程式 -ΔU = f の反復ソルバー")
    parser.add_argument("--config", type=str, help="設定ファイル（YAML）のパス")
    parser.add_argument(
        "--command",
        choices=["solve", "study", "compare"],
        default="solve",
        help="実行する処理",
    )
    parser.add_argument("--test-case", type=str, help="テストケース名（CAS1〜CAS6）")
    parser.add_argument("--n", type=int, help="1方向あたりの格子点数（境界を含む）")
    parser.add_argument(
        "--method",
        choices=[m.value for m in SolverMethod],
        help="反復解法",
    )
    parser.add_argument("--debug", action="store_true", help="デバッグモードを有効化")
    return parser.parse_args(argv)


def load_config(args) -> RunConfig:
    """設定ファイルを読み込み、コマンドライン引数で上書き"""
    config = RunConfig.from_yaml(args.config) if args.config else RunConfig()

    if args.test_case:
        config.test_case = args.test_case
    if args.n is not None:
        config.mesh.n_total = args.n
    if args.method:
        config.solver.method = args.method
    if args.debug:
        config.logging.level = "debug"
        config.logging.console_logging["level"] = "debug"

    config.validate()
    return config


def setup_logging(config: RunConfig) -> PoissonLogger:
    """ロギングを設定"""
    return PoissonLogger("poisson2d", config.logging)


def build_mesh(config: RunConfig, logger: PoissonLogger) -> Mesh:
    """設定に従って格子を生成し、テストケースを設定"""
    test_case = config.get_test_case()
    mesh = Mesh(config.mesh.n_total, config.build_boundary_conditions(), logger=logger)
    mesh.configure_test_case(test_case)
    logger.log_state(mesh.get_diagnostics(), level="debug")
    return mesh


def run_solve(config: RunConfig, logger: PoissonLogger) -> None:
    """1つの格子で解いて結果を表示"""
    mesh = build_mesh(config, logger)
    analyzer = ErrorAnalyzer(logger=logger.start_section("analysis"))

    with IterativeSolver(config.solver, logger=logger.start_section("solver")) as solver:
        result = solver.solve(
            mesh,
            progress_callback=lambda k: logger.debug(f"Iteration {k} completed"),
        )
        residual = solver.calculate_residual_norms(mesh)

    analysis = analyzer.compute_errors(mesh)
    print(result)
    print(f"Residual: max = {residual.max:.6e}, rms = {residual.rms:.6e}")
    print(
        "Discretization error estimate (h²/12): "
        f"{analyzer.calculate_discretization_error_estimate(mesh):.6e}"
    )
    factor = analyzer.analyze_iterative_convergence(result.error_history)
    print(f"Convergence factor: {factor:.6f}")
    print(generate_report(analysis))


def run_study(config: RunConfig, logger: PoissonLogger) -> None:
    """収束次数の調査"""
    test_case = config.get_test_case()
    with IterativeSolver(config.solver, logger=logger.start_section("solver")) as solver:
        analyzer = ErrorAnalyzer(solver, logger=logger.start_section("analysis"))
        study = analyzer.study_convergence(
            test_case,
            config.study.mesh_sizes,
            config.solver.method,
            boundary_conditions=config.build_boundary_conditions(),
            tolerance=config.study.tolerance,
            max_iterations=config.study.max_iterations,
        )

    print(study)
    print(generate_report(study.finest_analysis, study))


def run_compare(config: RunConfig, logger: PoissonLogger) -> None:
    """全解法を同じ初期状態から比較"""
    mesh = build_mesh(config, logger)
    with IterativeSolver(config.solver, logger=logger.start_section("solver")) as solver:
        analyzer = ErrorAnalyzer(solver, logger=logger.start_section("analysis"))
        comparisons = analyzer.compare_methods(mesh)

    analysis = comparisons[0].analysis
    print(generate_report(analysis, comparisons=comparisons))


COMMANDS = {"solve": run_solve, "study": run_study, "compare": run_compare}


def main(argv: Optional[List[str]] = None) -> int:
    """メイン関数"""
    args = parse_args(argv)

    try:
        config = load_config(args)
    except (OSError, ValueError) as e:
        print(f"設定の読み込みに失敗しました: {e}", file=sys.stderr)
        return 1

    logger = setup_logging(config)
    logger.info(f"Command: {args.command}, test case: {config.test_case}")

    try:
        start = time.perf_counter()
        COMMANDS[args.command](config, logger)
        logger.log_performance(args.command, time.perf_counter() - start)
        return 0

    except Exception as e:
        logger.log_error_with_context(
            "計算中にエラーが発生",
            e,
            {"command": args.command, "config": config.to_dict()},
        )
        if args.debug:
            log_dir = Path(config.logging.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            logger.save_debug_info(log_dir / "debug_info.log")
        return 1


if __name__ == "__main__":
    sys.exit(main())
