# run.py
"""
Script de Execução Principal - Vacation Batch Runner

Ponto de entrada para executar o pipeline de férias: ingestão das
planilhas, validação e gravação das solicitações, aprovações e relatório.
Configura logging e executa o workflow.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from ferias.config import Config
from ferias.graph.state import FeriasState
from ferias.graph.workflow import FeriasWorkflow, initial_state
from ferias.utils.date_utils import parse_date, today as business_today
from ferias.utils.excel_handler import ExcelHandler

VERSION = "Gestão de Férias v1.0.0"


# Configurar logging
def setup_logging(debug_mode=False):
    """Configura o sistema de logging"""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    log_level = logging.DEBUG if debug_mode else getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)
    log_file = log_dir / f"ferias_processing_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(log_file, encoding="utf-8"), logging.StreamHandler()],
    )
    return logging.getLogger(__name__)


def print_header():
    """Imprime cabecalho do sistema"""
    print("=" * 60)
    print(" " * 18 + "GESTAO DE FERIAS")
    print(" " * 10 + "Agendamento, Aprovacao e Saldos")
    print("=" * 60)
    print()


def print_results(state: FeriasState):
    """Imprime resumo dos resultados"""
    print("\n" + "=" * 60)
    print("RESUMO DO PROCESSAMENTO")
    print("=" * 60)

    if state.get("success"):
        print("OK Status: SUCESSO")
    else:
        print("X Status: FALHA")

    print(f"Total de colaboradores: {state.get('total_employees', 0)}")
    print(f"Solicitacoes aceitas: {state.get('accepted_requests', 0)}")
    print(f"Solicitacoes rejeitadas: {state.get('rejected_requests', 0)}")
    print(f"Notificacoes geradas: {len(state.get('notifications', []))}")

    if state.get("output_file"):
        print(f"\nArquivo gerado: {state['output_file']}")

    if state.get("errors"):
        print(f"\nErros encontrados: {len(state['errors'])}")
        for error in state["errors"][:3]:  # Mostrar ate 3 erros
            print(f"   - {error['stage']}: {error['error'][:80]}")

    if state.get("warnings"):
        print(f"\nAvisos: {len(state['warnings'])}")
        for warning in state["warnings"][:3]:  # Mostrar ate 3 avisos
            print(f"   - {warning.get('stage', 'N/A')}: {warning.get('message', 'N/A')}")

    print("=" * 60)


async def run_workflow(input_path: Path, output_path: Path, reference_date=None,
                       debug: bool = False) -> int:
    """Executa o workflow de processamento de férias"""
    logger = setup_logging(debug)

    today = reference_date or business_today(Config.TIMEZONE)
    state = initial_state(today)

    try:
        print_header()
        print(f">> Data de referencia: {today.strftime('%d/%m/%Y')}")
        print(f"Data/Hora: {datetime.now().strftime('%d/%m/%Y %H:%M:%S')}\n")

        try:
            Config.validate(input_path, output_path)
        except ValueError as e:
            print(f"X Erro: {e}")
            return 1

        logger.info("Criando workflow...")
        app = FeriasWorkflow(str(input_path), str(output_path)).compile()

        logger.info("Executando pipeline de processamento...")
        result = await app.ainvoke(state)

        print_results(result)

        if result["success"]:
            logger.info("Processamento concluido com sucesso")
            print("\nOK Processamento finalizado com sucesso!")
            return 0

        logger.error("Processamento concluido com erros")
        print("\nX Processamento finalizado com erros.")
        return 1

    except KeyboardInterrupt:
        print("\n\nProcessamento interrompido pelo usuario")
        logger.warning("Processamento interrompido")
        return 2

    except Exception as e:
        print(f"\n\nX Erro fatal: {str(e)}")
        logger.error(f"Erro fatal no processamento: {str(e)}", exc_info=True)
        return 1


def validate_environment(input_path: Path) -> bool:
    """Valida o ambiente antes de executar"""
    errors = []

    if not input_path.exists():
        errors.append(f"Diretorio de entrada nao existe: {input_path}")
    else:
        for key in ExcelHandler.REQUIRED_FILES:
            base_name = ExcelHandler.FILES_MAP[key]
            if ExcelHandler.find_input_file(input_path, base_name) is None:
                errors.append(f"Arquivo obrigatorio nao encontrado: {base_name}(.xlsx|.csv)")

    if errors:
        print("X Erros de validacao do ambiente:")
        for error in errors:
            print(f"   - {error}")
        return False

    return True


def _reference_date(text: str):
    try:
        return parse_date(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Data invalida: {text} (use YYYY-MM-DD)")


def main():
    """Funcao principal"""
    parser = argparse.ArgumentParser(
        description="Gestao de Ferias - Processamento em lote de solicitacoes e aprovacoes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos de uso:
 python run.py                          # Processa data/input com a data de hoje
 python run.py --today 2026-10-19       # Fixa a data de referencia
 python run.py --input planilhas/       # Usa outro diretorio de entrada
 python run.py --debug                  # Executa em modo debug
 python run.py --validate               # Apenas valida o ambiente
       """,
    )

    parser.add_argument("--input", type=Path, default=Config.INPUT_PATH,
                        help="Diretorio com as planilhas de entrada")
    parser.add_argument("--output", type=Path, default=Config.OUTPUT_PATH,
                        help="Diretorio do relatorio gerado")
    parser.add_argument("--today", type=_reference_date, default=None,
                        help="Data de referencia (formato: YYYY-MM-DD)")
    parser.add_argument("--debug", action="store_true",
                        help="Ativar modo debug com logs detalhados")
    parser.add_argument("--validate", action="store_true",
                        help="Apenas valida o ambiente sem executar o processamento")
    parser.add_argument("--version", action="version", version=VERSION)

    args = parser.parse_args()

    # Modo validacao
    if args.validate:
        print("Validando ambiente...")
        if validate_environment(args.input):
            print("OK Ambiente valido e pronto para execucao!")
            sys.exit(0)
        print("X Ambiente invalido. Corrija os erros acima.")
        sys.exit(1)

    if not validate_environment(args.input):
        print("\nExecute com --validate para mais detalhes")
        sys.exit(1)

    try:
        exit_code = asyncio.run(run_workflow(args.input, args.output, args.today, args.debug))
    except KeyboardInterrupt:
        print("\nProcessamento interrompido pelo usuario")
        exit_code = 2
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
