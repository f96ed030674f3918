# ferias/core/exceptions.py
"""
Exceções do sistema de férias

Violações de regra de negócio NÃO são exceções: o motor de validação
devolve um ValidationResult. As classes abaixo cobrem falhas de contrato
(configuração ausente), transições ilegais do fluxo de aprovação e
operações bloqueadas.
"""


class FeriasError(Exception):
    """Base de todas as exceções do sistema"""


class ConfigurationError(FeriasError, ValueError):
    """Configuração ou dado colaborador obrigatório ausente/inválido"""


class InvalidTransitionError(FeriasError, ValueError):
    """Ação de fluxo não permitida a partir do status atual"""

    def __init__(self, status, action):
        self.status = status
        self.action = action
        super().__init__(f"Ação '{action}' não permitida para período com status '{status}'")


class ApprovalNotAllowedError(FeriasError, PermissionError):
    """Aprovador não possui alçada para a solicitação"""


class OperationBlockedError(FeriasError, ValueError):
    """Operação bloqueada por férias já iniciadas ou concluídas"""
