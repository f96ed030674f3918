from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional, List, Literal
from enum import Enum

from ferias.utils.date_utils import parse_date


class Role(str, Enum):
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"
    RH = "rh"


class WorkflowStatus(str, Enum):
    """Status persistido do fluxo de aprovação do período aquisitivo"""

    PLANNING = "planning"
    PENDING_MANAGER = "pending_manager"
    PENDING_RH = "pending_rh"
    SCHEDULED = "scheduled"
    REJECTED = "rejected"


class PeriodDisplayStatus(str, Enum):
    """Status derivado (nunca persistido) do período aquisitivo"""

    PLANNING = "planning"
    PENDING_MANAGER = "pending_manager"
    PENDING_RH = "pending_rh"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"
    ENJOYED = "enjoyed"


class FractionStatus(str, Enum):
    PLANNED = "planned"
    SCHEDULED = "scheduled"
    ENJOYING = "enjoying"
    ENJOYED = "enjoyed"
    CANCELED = "canceled"
    REJECTED = "rejected"


class HolidayType(str, Enum):
    FERIADO = "feriado"
    PONTO_FACULTATIVO = "ponto_facultativo"
    RECESSO = "recesso"
    CUSTOM = "custom"


class AbonoBasis(str, Enum):
    SYSTEM = "system"
    INITIAL_BALANCE = "initial_balance"
    CURRENT_BALANCE = "current_balance"


class DayInputMode(str, Enum):
    SYSTEM = "system"
    LIST = "list"
    INPUT = "input"


# Frações que não consomem saldo
INACTIVE_FRACTION_STATUSES = (FractionStatus.CANCELED, FractionStatus.REJECTED)


class _DateFieldsModel(BaseModel):
    """Aceita datas em ISO, DD/MM/YYYY ou Timestamp vindos de planilha"""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_dates(cls, value, info):
        field = cls.model_fields.get(info.field_name)
        if field is not None and field.annotation in (date, Optional[date]):
            return parse_date(value)
        return value


class Leave(_DateFieldsModel):
    """Afastamento (licença) do colaborador"""

    id: int
    tipo: Literal["licenca_medica", "licenca_maternidade", "outro"] = "outro"
    data_inicio: date
    data_fim: date
    descricao: str = ""


class SignatureEvent(BaseModel):
    name: Literal[
        "Notificação enviada",
        "Operação visualizada",
        "Termos da assinatura eletrônica",
        "Assinatura efetuada",
        "Operação concluída",
    ]
    timestamp: datetime
    detalhes: str = ""


class SignatureParticipant(BaseModel):
    assinante_id: int
    data_conclusao: Optional[datetime] = None
    eventos: List[SignatureEvent] = Field(default_factory=list)


class SignatureInfo(BaseModel):
    """Envelope de assinatura eletrônica (opaco para o motor)"""

    document_id: str
    operation_id: str
    participantes: List[SignatureParticipant] = Field(default_factory=list)


class VacationFraction(_DateFieldsModel):
    """Fração de férias gozada a partir de um período aquisitivo"""

    id: int
    sequencia: int = Field(1, ge=1)
    inicio_ferias: date
    termino_ferias: date
    quantidade_dias: int = Field(..., gt=0)
    dias_abono: int = Field(0, ge=0)
    adiantamento13: bool = False
    status: FractionStatus = FractionStatus.PLANNED

    @property
    def is_active(self) -> bool:
        """Fração que consome saldo (não cancelada nem rejeitada)"""
        return self.status not in INACTIVE_FRACTION_STATUSES


class AccrualPeriod(_DateFieldsModel):
    """Período aquisitivo (P.A.) de 12 meses"""

    id: int
    rotulo_periodo: str = ""
    inicio_pa: date
    termino_pa: date
    limite_concessao: date
    saldo_total: int = Field(30, ge=0)
    status: WorkflowStatus = WorkflowStatus.PLANNING
    tipo_entrada_dias_ferias: DayInputMode = DayInputMode.SYSTEM
    base_calculo_abono: AbonoBasis = AbonoBasis.SYSTEM
    fracionamentos: List[VacationFraction] = Field(default_factory=list)
    id_aprovador_gestor: Optional[int] = None
    id_aprovador_rh: Optional[int] = None
    info_assinatura: Optional[SignatureInfo] = None

    def active_fractions(self, exclude_id: Optional[int] = None) -> List[VacationFraction]:
        return [
            f for f in self.fracionamentos
            if f.is_active and (exclude_id is None or f.id != exclude_id)
        ]


class Employee(_DateFieldsModel):
    id: int
    matricula: str = Field(..., description="Matrícula do colaborador")
    nome: str
    data_admissao: date
    cargo: str = ""
    unidade: Optional[str] = None
    area: Optional[str] = None
    departamento: Optional[str] = None
    gestor: Optional[int] = None
    email: str = ""
    role: Role = Role.USER
    status: Literal["active", "inactive"] = "active"
    nivel_hierarquico: int = 1
    periodos_aquisitivos: List[AccrualPeriod] = Field(default_factory=list)
    afastamentos: List[Leave] = Field(default_factory=list)

    def find_period(self, period_id: int) -> Optional[AccrualPeriod]:
        return next((p for p in self.periodos_aquisitivos if p.id == period_id), None)


class OrgUnit(BaseModel):
    id: int
    nome: str
    tipo: str = "Área"
    id_pai: Optional[int] = None


class Holiday(_DateFieldsModel):
    id: int = 0
    data: date
    descricao: str = ""
    tipo: str = HolidayType.FERIADO.value
    unidade: Optional[str] = None


class CollectiveVacationRule(_DateFieldsModel):
    id: int = 0
    descricao: str = ""
    inicio: date
    fim: date
    unidade: Optional[str] = None
    area: Optional[str] = None
    departamento: Optional[str] = None
    colaborador_ids: List[int] = Field(default_factory=list)


class StatusConfig(BaseModel):
    id: str
    label: str
    style: Literal["success", "warning", "danger", "info", "neutral"] = "neutral"
    active: bool = True
    category: Literal["period", "fraction", "both"] = "both"
    is_system: bool = False


def default_status_catalog() -> List[StatusConfig]:
    """Catálogo padrão de status (todos de sistema)"""
    return [
        StatusConfig(id="planning", label="Em planejamento", style="neutral", category="period", is_system=True),
        StatusConfig(id="pending_manager", label="Aguardando Gestor", style="warning", category="period", is_system=True),
        StatusConfig(id="pending_rh", label="Aguardando RH", style="warning", category="period", is_system=True),
        StatusConfig(id="rejected", label="Rejeitado", style="danger", category="period", is_system=True),
        StatusConfig(id="planned", label="Planejado", style="neutral", category="fraction", is_system=True),
        StatusConfig(id="scheduled", label="Programado", style="success", category="both", is_system=True),
        StatusConfig(id="enjoying", label="Em Gozo", style="info", category="fraction", is_system=True),
        StatusConfig(id="enjoyed", label="Gozado", style="info", category="both", is_system=True),
        StatusConfig(id="canceled", label="Cancelado", style="danger", category="fraction", is_system=True),
    ]


class AppConfig(_DateFieldsModel):
    dias_ferias_options: List[int] = Field(default_factory=lambda: [5, 10, 15, 20, 30])
    tipo_entrada_dias_ferias: Literal["list", "input"] = "list"
    base_calculo_abono: Literal["initial_balance", "current_balance"] = "initial_balance"
    antecedencia_minima_dias: int = 30
    antecedencia_minima_abono_dias: int = 60
    max_fracionamentos: int = 3
    prazo_limite_concessao_dias: int = 330
    inicio_adiantamento13: str = "01/02"
    fim_adiantamento13: str = "31/10"
    exibir_limite_prazo: Optional[date] = None
    status_ferias: List[StatusConfig] = Field(default_factory=default_status_catalog)


class FractionRequest(_DateFieldsModel):
    """Dados propostos para uma nova fração (ou edição de uma existente)"""

    data_inicio: Optional[date] = None
    quantidade_dias: int = 0
    solicitar_abono: bool = False
    dias_abono: int = Field(0, ge=0)
    adiantamento13: bool = False

    @property
    def effective_abono_days(self) -> int:
        return self.dias_abono if self.solicitar_abono else 0


class ValidationResult(BaseModel):
    """Resultado discriminado da validação: aceito ou primeira regra violada"""

    ok: bool
    regra: Optional[str] = None
    motivo: Optional[str] = None

    @classmethod
    def accepted(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def rejected(cls, regra: str, motivo: str) -> "ValidationResult":
        return cls(ok=False, regra=regra, motivo=motivo)


class BalanceSummary(BaseModel):
    dias_utilizados: int
    dias_abono: int
    saldo_restante: int
    cota_abono: int


class Notification(BaseModel):
    user_id: int
    message: str
