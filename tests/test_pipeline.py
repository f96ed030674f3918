"""Execução ponta a ponta do grafo sobre planilhas CSV."""

import pandas as pd
import pytest

from ferias.core.models import FractionStatus, WorkflowStatus
from ferias.graph.workflow import FeriasWorkflow, initial_state

from tests.conftest import TODAY

FILES = {
    "COLABORADORES.csv": (
        "id,matricula,nome,data_admissao,cargo,unidade,area,departamento,gestor,email,role,status,nivel_hierarquico\n"
        "1,1001,Ana Souza,2024-08-01,Analista,Matriz,Tecnologia,Tecnologia,2,ana@empresa.com,user,active,1\n"
        "2,1002,Bruno Lima,2018-01-10,Gerente,Matriz,Tecnologia,Tecnologia,,bruno@empresa.com,manager,active,2\n"
        "3,1003,Carla Dias,2015-05-04,Analista RH,Matriz,Recursos Humanos,Recursos Humanos,,carla@empresa.com,rh,active,2\n"
    ),
    "PERIODOS.csv": (
        "id,colaborador_id,inicio_pa,termino_pa,limite_concessao,saldo_total,status\n"
        "10,1,2025-08-01,2026-07-31,2027-06-26,30,planning\n"
        "20,2,2025-01-10,2026-01-09,,30,scheduled\n"
    ),
    "FRACOES.csv": (
        "id,periodo_id,inicio_ferias,quantidade_dias,dias_abono,adiantamento13,status\n"
        "1,20,2026-03-02,15,0,false,scheduled\n"
    ),
    "FERIADOS.csv": "data,descricao,tipo\n2026-12-25,Natal,feriado\n",
    "UNIDADES_ORGANIZACIONAIS.csv": (
        "id,nome,tipo,id_pai\n"
        "1,Diretoria,Área,\n"
        "2,Tecnologia,Área,1\n"
        "3,Recursos Humanos,Área,1\n"
    ),
    "SOLICITACOES.csv": (
        "matricula,periodo_id,data_inicio,quantidade_dias,dias_abono,adiantamento13\n"
        "1001,10,2026-11-30,20,0,false\n"
        "1001,10,2027-01-08,10,0,false\n"
        "1001,10,2027-01-04,10,0,false\n"
        "9999,10,2027-01-04,10,0,false\n"
    ),
    "APROVACOES.csv": (
        "matricula,periodo_id,aprovador_matricula,acao\n"
        "1001,10,1002,aprovar\n"
        "1001,10,1002,aprovar\n"
        "1001,10,1003,aprovar\n"
    ),
}


@pytest.fixture
def input_dir(tmp_path):
    directory = tmp_path / "input"
    directory.mkdir()
    for name, content in FILES.items():
        (directory / name).write_text(content, encoding="utf-8")
    return directory


def _run(input_dir, output_dir):
    app = FeriasWorkflow(str(input_dir), str(output_dir)).compile()
    return app.invoke(initial_state(TODAY))


class TestPipeline:
    def test_full_run(self, input_dir, tmp_path):
        result = _run(input_dir, tmp_path / "output")

        assert result["success"], result["errors"]
        assert result["processing_stage"] == "report_complete"
        assert result["total_employees"] == 3

        schedule = result["schedule_results"]
        assert schedule["aceito"].tolist() == [True, False, True, False]
        assert schedule["regra"].tolist()[1] == "inicio_antes_repouso"
        assert schedule["regra"].tolist()[3] == "erro"
        assert result["accepted_requests"] == 2

        approvals = result["approval_results"]
        assert approvals["sucesso"].tolist() == [True, False, True]
        assert approvals["status_novo"].tolist()[2] == "scheduled"

        period = result["repository"].find_by_matricula("1001").find_period(10)
        assert period.status == WorkflowStatus.SCHEDULED
        assert [f.id for f in period.fracionamentos] == [2, 3]
        assert all(f.status == FractionStatus.SCHEDULED for f in period.fracionamentos)
        assert period.id_aprovador_gestor == 2
        assert period.id_aprovador_rh == 3

        assert len(result["notifications"]) == 6

    def test_report_workbook(self, input_dir, tmp_path):
        result = _run(input_dir, tmp_path / "output")

        workbook = pd.ExcelFile(result["output_file"])
        assert workbook.sheet_names == ["solicitacoes", "aprovacoes", "notificacoes", "status"]
        status = pd.read_excel(workbook, sheet_name="status")
        assert len(status) == 3
        assert set(status["Matricula"].astype(str)) == {"1001", "1002"}

    def test_day_count_outside_options_rejected(self, input_dir, tmp_path):
        (input_dir / "SOLICITACOES.csv").write_text(
            "matricula,periodo_id,data_inicio,quantidade_dias,dias_abono,adiantamento13\n"
            "1001,10,2026-11-30,17,0,false\n"
            "1001,10,2026-11-30,20,16,false\n",
            encoding="utf-8",
        )
        result = _run(input_dir, tmp_path / "output")

        schedule = result["schedule_results"]
        assert schedule["aceito"].tolist() == [False, False]
        assert schedule["regra"].tolist() == ["opcao_dias", "cota_abono"]
        assert result["repository"].find_by_matricula("1001").find_period(10).fracionamentos == []

    def test_free_day_input_accepts_any_count(self, input_dir, tmp_path):
        (input_dir / "SOLICITACOES.csv").write_text(
            "matricula,periodo_id,data_inicio,quantidade_dias,dias_abono,adiantamento13\n"
            "1001,10,2026-11-30,17,0,false\n",
            encoding="utf-8",
        )
        (input_dir / "CONFIGURACAO.csv").write_text(
            "chave,valor\ntipo_entrada_dias_ferias,input\n", encoding="utf-8"
        )
        result = _run(input_dir, tmp_path / "output")

        assert result["schedule_results"]["aceito"].tolist() == [True]

    def test_missing_required_file_fails(self, input_dir, tmp_path):
        (input_dir / "PERIODOS.csv").unlink()
        result = _run(input_dir, tmp_path / "output")

        assert not result["success"]
        assert result["errors"][0]["stage"] == "ingestion"
        assert result["output_file"] is None
