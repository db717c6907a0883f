import base64
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest
import yaml

from bank_report.config import ReportConfig
from bank_report.core import PipelineContext

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)

COEFFICIENTS = [
    ("age", 0.02),
    ("poutcome_success", 0.98),
    ("month_may", -0.68),
    ("cons.price.idx", 1.42),
    ("emp.var.rate", -2.47),
    ("contact_cellular", 0.33),
    ("contact_telephone", -0.33),
    ("campaign", -0.17),
    ("month_mar", 1.25),
    ("job_student", 0.27),
    ("job_retired", 0.30),
    ("pdays", -0.26),
    ("euribor3m", 0.63),
    ("nr.employed", -0.89),
    ("month_nov", -0.44),
    ("month_jun", -0.51),
    ("default_unknown", -0.29),
    ("month_aug", 0.74),
    ("marital_single", 0.06),
    ("loan_yes", -0.03),
    ("housing_yes", -0.01),
    ("month_dec", 0.41),
    ("day_of_week_mon", -0.19),
    ("month_jul", 0.24),
]


def base_config() -> dict:
    return {
        "report": {
            "title": "Test Report",
            "author": "Analytics",
            "date": "2024-05-01",
            "output": "out/report.html",
        },
        "stages": {
            "attributes": {
                "path": "data/attributes.csv",
                "columns": ["name", "type", "description"],
                "intro": "Dataset overview.",
            },
            "hyperparameters": {
                "models": [
                    {"name": "Random Forest", "path": "data/rf_params.csv", "strip_prefix": "classifier__"},
                    {"name": "Logistic Regression", "path": "data/lr_params.csv"},
                ],
            },
            "confusion_matrices": {
                "models": [
                    {"name": "Random Forest", "image": "data/cm_rf.png"},
                    {"name": "Logistic Regression", "image": "data/cm_lr.jpg"},
                ],
            },
            "scores": {
                "compare": True,
                "models": [
                    {"name": "Random Forest", "scores": {"accuracy": 0.91, "precision": 0.66, "recall": 0.51, "f1": 0.5754}},
                    {"name": "Logistic Regression", "scores": {"accuracy": 0.91, "precision": 0.67, "recall": 0.43, "f1": 0.5238}},
                ],
            },
            "coefficients": {
                "path": "data/coefficients.csv",
                "top_n": 10,
                "bottom_n": 11,
            },
            "discussion": {
                "sections": [
                    {"title": "Discussion", "text": "First paragraph.\n\nSecond paragraph with <tags>."},
                ],
            },
            "render": {},
        },
    }


@pytest.fixture
def report_workspace(tmp_path):
    """A working directory holding every input the default stages read."""
    data = tmp_path / "data"
    data.mkdir()
    pd.DataFrame(
        {
            "name": ["age", "job", "y"],
            "type": ["numeric", "categorical", "binary"],
            "description": ["Age of the client", "Type of job", "Subscribed to a term deposit"],
        }
    ).to_csv(data / "attributes.csv", index=False)
    pd.DataFrame(
        [{"classifier__n_estimators": 400, "classifier__max_depth": 18, "classifier__max_features": "sqrt"}]
    ).to_csv(data / "rf_params.csv", index=False)
    pd.DataFrame({"parameter": ["C", "penalty"], "value": ["0.0886", "l2"]}).to_csv(data / "lr_params.csv", index=False)
    pd.DataFrame(COEFFICIENTS, columns=["feature", "coefficient"]).to_csv(data / "coefficients.csv", index=False)
    (data / "cm_rf.png").write_bytes(PNG_BYTES)
    (data / "cm_lr.jpg").write_bytes(PNG_BYTES)
    return tmp_path


@pytest.fixture
def write_config(report_workspace):
    def _write(cfg: dict | None = None) -> Path:
        path = report_workspace / "report.yaml"
        path.write_text(yaml.safe_dump(cfg or base_config()), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def context(report_workspace, write_config):
    config = ReportConfig.load(write_config())
    return PipelineContext(config=config, workdir=report_workspace)
