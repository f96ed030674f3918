# ferias/config.py
"""
Configurações centralizadas do sistema
"""

import os
from pathlib import Path

from ferias.core.exceptions import ConfigurationError


class Config:
    # Caminhos
    BASE_DIR = Path(__file__).parent.parent
    INPUT_PATH = Path(os.getenv("INPUT_PATH", BASE_DIR / "data" / "input"))
    OUTPUT_PATH = Path(os.getenv("OUTPUT_PATH", BASE_DIR / "data" / "output"))

    # Fuso usado apenas para determinar "hoje" na borda do sistema
    TIMEZONE = os.getenv("FERIAS_TIMEZONE", "America/Sao_Paulo")

    # Organização
    RH_DEPARTAMENTO = "Recursos Humanos"
    SALDO_TOTAL_PADRAO = 30

    # Regras de negócio (padrões da configuração do sistema)
    DIAS_FERIAS_OPTIONS = [5, 10, 15, 20, 30]
    TIPO_ENTRADA_DIAS_FERIAS = "list"
    BASE_CALCULO_ABONO = "initial_balance"
    ANTECEDENCIA_MINIMA_DIAS = 30
    ANTECEDENCIA_MINIMA_ABONO_DIAS = 60
    MAX_FRACIONAMENTOS = 3
    PRAZO_LIMITE_CONCESSAO_DIAS = 330
    INICIO_ADIANTAMENTO_13 = "01/02"
    FIM_ADIANTAMENTO_13 = "31/10"
    EXIBIR_LIMITE_PRAZO = None

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls, input_path=None, output_path=None):
        """Valida configurações"""
        input_path = Path(input_path or cls.INPUT_PATH)
        output_path = Path(output_path or cls.OUTPUT_PATH)
        if not input_path.exists():
            raise ValueError(f"Diretório de entrada não existe: {input_path}")

        output_path.mkdir(parents=True, exist_ok=True)
        return True

    @classmethod
    def app_config(cls, **overrides):
        """
        Monta a configuração de políticas a partir dos padrões da classe

        Args:
            **overrides: Campos do AppConfig a sobrescrever

        Returns:
            AppConfig: Configuração pronta para o motor de regras
        """
        from ferias.core.models import AppConfig, default_status_catalog

        values = {
            "dias_ferias_options": list(cls.DIAS_FERIAS_OPTIONS),
            "tipo_entrada_dias_ferias": cls.TIPO_ENTRADA_DIAS_FERIAS,
            "base_calculo_abono": cls.BASE_CALCULO_ABONO,
            "antecedencia_minima_dias": cls.ANTECEDENCIA_MINIMA_DIAS,
            "antecedencia_minima_abono_dias": cls.ANTECEDENCIA_MINIMA_ABONO_DIAS,
            "max_fracionamentos": cls.MAX_FRACIONAMENTOS,
            "prazo_limite_concessao_dias": cls.PRAZO_LIMITE_CONCESSAO_DIAS,
            "inicio_adiantamento13": cls.INICIO_ADIANTAMENTO_13,
            "fim_adiantamento13": cls.FIM_ADIANTAMENTO_13,
            "exibir_limite_prazo": cls.EXIBIR_LIMITE_PRAZO,
            "status_ferias": default_status_catalog(),
        }
        values.update(overrides)
        return AppConfig(**values)


def require_config(config):
    """Garante que a configuração do sistema foi carregada"""
    if config is None:
        raise ConfigurationError("Configuração do sistema (AppConfig) não carregada")
    return config
