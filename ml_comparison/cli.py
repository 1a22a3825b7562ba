import typer
from rich import print

from .config import AppConfig
from .logger import init_logging
from .schemas import NetworkBenchmarkRequest, TreeBenchmarkRequest
from .services.benchmark import run_decision_tree_benchmark, run_neural_network_benchmark, write_results

APP_VERSION = "0.1.0"

app = typer.Typer(help="Decision tree vs. neural network benchmark")


def _load(config_path: str | None) -> AppConfig:
    cfg = AppConfig.load(config_path)
    init_logging(cfg.log)
    return cfg


@app.command()
def version():
    print(APP_VERSION)


@app.command()
def tree(
    config: str = typer.Option(None, help="YAML config file"),
    train_csv: str = typer.Option(None, help="Training CSV (overrides config)"),
    valid_csv: str = typer.Option(None, help="Validation CSV (overrides config)"),
    output: str = typer.Option(None, help="Results CSV (overrides config)"),
    repeats: int = typer.Option(None, min=1, help="Sweep repetitions (overrides config)"),
):
    """
    Time decision tree training/validation for every row fraction and feature count.
    """
    cfg = _load(config)
    request = TreeBenchmarkRequest(
        train_csv=train_csv or cfg.dataset.train_csv,
        valid_csv=valid_csv or cfg.dataset.valid_csv,
        n_x_vars=cfg.dataset.n_x_vars,
        repeats=repeats or cfg.tree.repeats,
        max_x_vars=cfg.tree.max_x_vars,
    )
    out = output or cfg.tree.output_csv
    print(f"[green]Training and validating decision tree algorithm... (Writing results to {out})[/green]")
    write_results(run_decision_tree_benchmark(request), out)


@app.command()
def nn(
    config: str = typer.Option(None, help="YAML config file"),
    train_csv: str = typer.Option(None, help="Training CSV (overrides config)"),
    valid_csv: str = typer.Option(None, help="Validation CSV (overrides config)"),
    output: str = typer.Option(None, help="Results CSV (overrides config)"),
    repeats: int = typer.Option(None, min=1, help="Sweep repetitions (overrides config)"),
    epochs: int = typer.Option(None, min=1, help="Training epochs (overrides config)"),
    learning_rate: float = typer.Option(None, help="SGD learning rate (overrides config)"),
):
    """
    Time neural network training/validation for every row fraction and feature count.
    """
    cfg = _load(config)
    request = NetworkBenchmarkRequest(
        train_csv=train_csv or cfg.dataset.train_csv,
        valid_csv=valid_csv or cfg.dataset.valid_csv,
        n_x_vars=cfg.dataset.n_x_vars,
        repeats=repeats or cfg.network.repeats,
        max_x_vars=cfg.network.max_x_vars,
        learning_rate=learning_rate or cfg.network.learning_rate,
        epochs=epochs or cfg.network.epochs,
        seed=cfg.network.seed,
    )
    out = output or cfg.network.output_csv
    print(f"[green]Training and validating deep learning algorithm... (Writing results to {out})[/green]")
    write_results(run_neural_network_benchmark(request), out)


@app.command()
def run(config: str = typer.Option(None, help="YAML config file")):
    """
    Run both benchmarks with the settings from the config file.
    """
    nn(config=config, train_csv=None, valid_csv=None, output=None, repeats=None, epochs=None, learning_rate=None)
    tree(config=config, train_csv=None, valid_csv=None, output=None, repeats=None)


if __name__ == "__main__":
    app()

# python -m ml_comparison.cli run --config config/base.yml
