import pandas as pd
import pytest

from bank_report.config import ReportConfig
from bank_report.core import PipelineContext
from bank_report.report import confusion

from conftest import base_config


def test_images_are_embedded_per_model(context):
    result = confusion.run(context)

    blocks = context.document.get("confusion_matrices").blocks
    assert [b.kind for b in blocks] == ["image", "image"]
    assert blocks[1].data["mime"] == "image/jpeg"
    assert set(result.outputs["images"]) == {"Random Forest", "Logistic Regression"}


def test_heatmap_from_predictions(report_workspace, write_config):
    pd.DataFrame({"y_true": ["no", "no", "yes", "yes", "no"], "y_pred": ["no", "yes", "yes", "no", "no"]}).to_csv(
        report_workspace / "data" / "preds.csv", index=False
    )
    cfg = base_config()
    cfg["stages"]["confusion_matrices"]["models"] = [{"name": "Random Forest", "predictions": "data/preds.csv"}]
    context = PipelineContext(config=ReportConfig.load(write_config(cfg)), workdir=report_workspace)

    result = confusion.run(context)

    block = context.document.get("confusion_matrices").blocks[0]
    assert block.kind == "chart"
    assert block.data["labels"] == ["no", "yes"]
    assert block.data["matrix"] == [[2, 1], [1, 1]]
    assert result.outputs["images"] == {"Random Forest": "generated"}


def test_model_without_image_or_predictions(report_workspace, write_config):
    cfg = base_config()
    cfg["stages"]["confusion_matrices"]["models"] = [{"name": "Random Forest"}]
    context = PipelineContext(config=ReportConfig.load(write_config(cfg)), workdir=report_workspace)

    with pytest.raises(KeyError):
        confusion.run(context)
