"""
Benchmark API.

This module exposes a FastAPI application that runs the decision tree and
neural network benchmarks on CSV files available to the server.

Endpoints
---------
- GET  `/`                   : Liveness/health check.
- GET  `/version`            : App version.
- POST `/benchmark/tree`     : Decision tree sweep, returns records.
- POST `/benchmark/nn`       : Neural network sweep, returns records.
- POST `/benchmark/summary`  : Aggregate a list of records per (fraction, features).

Notes
-----
- Input validation is handled by the Pydantic models in ``.schemas``.
- Dataset paths are resolved against ``dataset.data_dir`` from the config;
  anything outside that directory is rejected.
- No benchmarking logic lives here; the API delegates to
  ``services.benchmark`` and ``services.metrics``.
"""

from typing import List

from fastapi import FastAPI, HTTPException
from loguru import logger

from .config import AppConfig
from .schemas import (
    BenchmarkRecord,
    BenchmarkRequest,
    BenchmarkResponse,
    NetworkBenchmarkRequest,
    SummaryRow,
    TreeBenchmarkRequest,
)
from .services.benchmark import records_to_frame, run_decision_tree_benchmark, run_neural_network_benchmark
from .services.metrics import summarize_records

APP_VERSION = "0.1.0"

app = FastAPI(
    title="ML Comparison Benchmark API",
    version=APP_VERSION,
    description="Time a from-scratch decision tree and neural network on tabular data",
)

SETTINGS = AppConfig.load()


def _confine_paths(payload: BenchmarkRequest) -> BenchmarkRequest:
    """Copy of `payload` with both dataset paths resolved inside the data directory."""
    dataset = SETTINGS.dataset
    return payload.model_copy(
        update={
            "train_csv": str(dataset.resolve_data_path(payload.train_csv)),
            "valid_csv": str(dataset.resolve_data_path(payload.valid_csv)),
        }
    )


@app.get("/")
async def health_check():
    """Liveness probe.

    Returns
    -------
    dict
        App version and status.
    """
    return {"version": APP_VERSION, "status": "OK"}


@app.get("/version")
async def version():
    return {"app_version": APP_VERSION}


@app.post("/benchmark/tree", response_model=BenchmarkResponse)
def benchmark_tree(payload: TreeBenchmarkRequest):
    """Run the decision tree sweep described by ``payload``.

    Raises
    ------
    HTTPException
        With status 400 if the files are missing/malformed, outside the data
        directory, or the run fails.
    """
    try:
        return BenchmarkResponse(records=run_decision_tree_benchmark(_confine_paths(payload)))
    except Exception as e:
        logger.exception("Decision tree benchmark failed")
        raise HTTPException(status_code=400, detail=f"Error during tree benchmark: {e}")


@app.post("/benchmark/nn", response_model=BenchmarkResponse)
def benchmark_nn(payload: NetworkBenchmarkRequest):
    """Run the neural network sweep described by ``payload``.

    Raises
    ------
    HTTPException
        With status 400 if the files are missing/malformed, outside the data
        directory, or the run fails.
    """
    try:
        return BenchmarkResponse(records=run_neural_network_benchmark(_confine_paths(payload)))
    except Exception as e:
        logger.exception("Neural network benchmark failed")
        raise HTTPException(status_code=400, detail=f"Error during nn benchmark: {e}")


@app.post("/benchmark/summary", response_model=List[SummaryRow])
async def benchmark_summary(payload: List[BenchmarkRecord]):
    """Mean/std of timings and mean accuracy per (fraction, features).

    Raises
    ------
    HTTPException
        With status 400 if the payload is empty.
    """
    try:
        if not payload:
            raise ValueError("Empty payload.")
        summary = summarize_records(records_to_frame(payload))
        return [SummaryRow(**row) for row in summary.to_dict(orient="records")]
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error during summary: {e}")
