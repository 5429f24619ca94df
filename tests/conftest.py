"""Shared document builders for the test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bpmn_layout.parser import load_document

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def node(node_id: str, node_type: str = "task", **extra) -> dict:
    return {"id": node_id, "type": node_type, **extra}


def flow(flow_id: str, source: str, target: str) -> dict:
    return {"id": flow_id, "source": source, "target": target}


def chain(*ids: str, prefix: str = "f") -> list[dict]:
    """Sequence flows linking *ids* in order: f1 a->b, f2 b->c, ..."""
    return [flow(f"{prefix}{i + 1}", a, b) for i, (a, b) in enumerate(zip(ids, ids[1:]))]


def process_doc(elements: list[dict], flows: list[dict], process_id: str = "p1", **body) -> dict:
    """Document with a single process and no collaboration."""
    return {"id": "defs", "processes": [{"id": process_id, "elements": elements, "flows": flows, **body}]}


def load_fixture(name: str) -> dict:
    return json.loads((FIXTURES_DIR / name).read_text())


@pytest.fixture
def simple_chain():
    """Start -> Task -> End in one process."""
    return load_document(
        process_doc(
            [node("start", "startEvent"), node("task"), node("end", "endEvent")],
            chain("start", "task", "end"),
        )
    )


@pytest.fixture
def fanout():
    """Exclusive gateway with three outgoing branches."""
    return load_document(
        process_doc(
            [
                node("start", "startEvent"),
                node("gw", "exclusiveGateway"),
                node("a"),
                node("b"),
                node("c"),
            ],
            [
                flow("f0", "start", "gw"),
                flow("f1", "gw", "a"),
                flow("f2", "gw", "b"),
                flow("f3", "gw", "c"),
            ],
        )
    )


@pytest.fixture
def two_pools():
    """Customer pool (no process) sending a message to a start event below."""
    return load_document(
        {
            "id": "defs",
            "processes": [
                {
                    "id": "p_shop",
                    "elements": [
                        node("order_received", "startEvent"),
                        node("ship"),
                        node("done", "endEvent"),
                    ],
                    "flows": chain("order_received", "ship", "done"),
                }
            ],
            "collaboration": {
                "id": "collab",
                "participants": [
                    {"id": "customer", "name": "Customer"},
                    {"id": "shop", "name": "Shop", "process": "p_shop"},
                ],
                "messageFlows": [flow("m1", "customer", "order_received")],
            },
        }
    )


@pytest.fixture
def fixture_document():
    """Factory loading a JSON fixture into a Definitions tree."""

    def _load(name: str):
        return load_document(load_fixture(name))

    return _load
