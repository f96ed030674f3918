# ferias/graph/workflow.py
"""
Definição do Workflow - Vacation Processing Workflow

Orquestra o fluxo de processamento através dos agentes
Define a sequência de execução e as transições entre estados
"""

from datetime import date
from typing import Optional

from langgraph.graph import StateGraph, END
from ferias.graph.state import FeriasState
from ferias.graph.nodes import build_nodes
import logging

logger = logging.getLogger(__name__)


class FeriasWorkflow:
    def __init__(self, input_path: Optional[str] = None, output_path: Optional[str] = None):
        self.workflow = StateGraph(FeriasState)
        self.nodes = build_nodes(input_path, output_path)
        self._setup_workflow()

    def _setup_workflow(self):
        """Configura o grafo do workflow"""
        # Adicionar nós
        for name, node in self.nodes.items():
            self.workflow.add_node(name, node)

        # Definir fluxo sequencial
        self.workflow.set_entry_point("ingest")
        self.workflow.add_edge("ingest", "schedule")
        self.workflow.add_edge("schedule", "approve")
        self.workflow.add_edge("approve", "report")
        self.workflow.add_edge("report", END)

        logger.info("Workflow configurado com sucesso")

    def compile(self):
        """Compila o grafo para execução"""
        return self.workflow.compile()


def initial_state(today: date) -> FeriasState:
    """Estado inicial do pipeline para a data de referência `today`"""
    return {
        "raw_files": {},
        "repository": None,
        "holidays": [],
        "collective_rules": [],
        "org_units": [],
        "config": None,
        "schedule_results": None,
        "approval_results": None,
        "status_report": None,
        "notifications": [],
        "today": today,
        "total_employees": 0,
        "accepted_requests": 0,
        "rejected_requests": 0,
        "errors": [],
        "warnings": [],
        "processing_stage": "initialized",
        "success": False,
        "output_file": None,
    }
