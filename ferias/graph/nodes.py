# ferias/graph/nodes.py
"""
Funções dos Nós do Grafo - Node Functions

Define as funções que serão executadas em cada nó do grafo
Cada função recebe o estado e retorna o estado atualizado
"""

from typing import Callable, Dict, Optional

from ferias.agents.approval import ApprovalAgent
from ferias.agents.data_ingestion import DataIngestionAgent
from ferias.agents.report_generation import ReportGenerationAgent
from ferias.agents.scheduling import SchedulingAgent
from ferias.config import Config
from ferias.graph.state import FeriasState


def build_nodes(input_path: Optional[str] = None,
                output_path: Optional[str] = None) -> Dict[str, Callable[[FeriasState], FeriasState]]:
    """
    Inicializa os agentes e devolve os nós na ordem de execução

    Args:
        input_path: Diretório das planilhas de entrada (padrão: Config.INPUT_PATH)
        output_path: Diretório do relatório (padrão: Config.OUTPUT_PATH)
    """
    ingestion_agent = DataIngestionAgent(str(input_path or Config.INPUT_PATH))
    scheduling_agent = SchedulingAgent()
    approval_agent = ApprovalAgent()
    report_agent = ReportGenerationAgent(str(output_path or Config.OUTPUT_PATH))

    def ingest_data(state: FeriasState) -> FeriasState:
        """Nó de ingestão de dados"""
        return ingestion_agent.execute(state)

    def schedule_requests(state: FeriasState) -> FeriasState:
        """Nó de validação e gravação das solicitações"""
        return scheduling_agent.execute(state)

    def apply_approvals(state: FeriasState) -> FeriasState:
        """Nó de aprovação gestor/RH"""
        return approval_agent.execute(state)

    def generate_report(state: FeriasState) -> FeriasState:
        """Nó de geração de relatório"""
        return report_agent.execute(state)

    return {
        "ingest": ingest_data,
        "schedule": schedule_requests,
        "approve": apply_approvals,
        "report": generate_report,
    }
