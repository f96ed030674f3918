# ferias/utils/excel_handler.py
import pandas as pd
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "s", "sim", "y", "yes", "x", "verdadeiro"}


class ExcelHandler:
    # Nome base de cada arquivo de entrada (.xlsx ou .csv)
    FILES_MAP = {
        "colaboradores": "COLABORADORES",
        "periodos": "PERIODOS",
        "fracoes": "FRACOES",
        "feriados": "FERIADOS",
        "ferias_coletivas": "FERIAS_COLETIVAS",
        "unidades": "UNIDADES_ORGANIZACIONAIS",
        "solicitacoes": "SOLICITACOES",
        "aprovacoes": "APROVACOES",
        "configuracao": "CONFIGURACAO",
    }
    REQUIRED_FILES = ["colaboradores", "periodos"]

    @staticmethod
    def read_excel_file(
        filepath: Path, sheet_name: Optional[str] = None
    ) -> pd.DataFrame:
        """Lê arquivo Excel (ou CSV) com tratamento de erros"""
        try:
            if filepath.suffix.lower() == ".csv":
                df = pd.read_csv(filepath, dtype=str, encoding="utf-8-sig")
            else:
                # Se sheet_name não especificado, usar primeira aba
                if sheet_name is None:
                    excel_file = pd.ExcelFile(filepath)
                    if len(excel_file.sheet_names) > 1:
                        logger.info(f"Usando aba '{excel_file.sheet_names[0]}' do arquivo {filepath.name}")
                    sheet_name = excel_file.sheet_names[0]
                    excel_file.close()
                df = pd.read_excel(filepath, sheet_name=sheet_name, dtype=str)

            # Padronizar cabeçalhos: minúsculas, sem espaços nas bordas
            df.columns = [str(col).strip().lower().replace(" ", "_") for col in df.columns]

            logger.info(f"Arquivo {filepath.name} carregado: {len(df)} registros")
            return df
        except Exception as e:
            logger.error(f"Erro ao ler {filepath}: {e}")
            raise

    @staticmethod
    def find_input_file(input_dir: Path, base_name: str) -> Optional[Path]:
        """Procura BASE.xlsx e depois BASE.csv"""
        for suffix in (".xlsx", ".csv"):
            candidate = input_dir / f"{base_name}{suffix}"
            if candidate.exists():
                return candidate
        return None

    @staticmethod
    def read_all_input_files(input_dir: Path) -> Dict[str, pd.DataFrame]:
        """Lê todos os arquivos de entrada encontrados em `input_dir`"""
        data = {}
        for key, base_name in ExcelHandler.FILES_MAP.items():
            filepath = ExcelHandler.find_input_file(input_dir, base_name)
            if filepath is not None:
                data[key] = ExcelHandler.read_excel_file(filepath)
            else:
                logger.warning(f"Arquivo não encontrado: {base_name}(.xlsx|.csv)")

        return data

    @staticmethod
    def dataframe_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
        """Converte linhas em dicts, trocando NaN/vazio por None"""
        records = []
        for row in df.to_dict(orient="records"):
            clean = {}
            for key, value in row.items():
                if isinstance(value, str):
                    value = value.strip() or None
                elif value is not None and pd.isna(value):
                    value = None
                clean[key] = value
            if any(v is not None for v in clean.values()):
                records.append(clean)
        return records

    @staticmethod
    def parse_bool(value) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    @staticmethod
    def parse_int(value) -> Optional[int]:
        """'12', '12.0' e 12.0 viram 12; vazio vira None"""
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        text = str(value).strip()
        if not text:
            return None
        return int(float(text))

    @staticmethod
    def parse_id_list(value) -> List[int]:
        """Lista de IDs separada por ';' ou ','"""
        if value is None:
            return []
        text = str(value).replace(",", ";")
        return [ExcelHandler.parse_int(part) for part in text.split(";") if part.strip()]

    @staticmethod
    def write_report(sheets: Dict[str, pd.DataFrame], filepath: Path) -> Path:
        """
        Salva um workbook com uma aba por DataFrame

        Args:
            sheets: Nome da aba -> DataFrame
            filepath: Arquivo .xlsx de destino

        Returns:
            Path: Caminho do arquivo gravado
        """
        logger.info(f"Salvando arquivo Excel: {filepath}")
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
            for sheet_name, df in sheets.items():
                df.to_excel(writer, sheet_name=sheet_name, index=False)

                # Ajustar largura das colunas ao conteúdo
                worksheet = writer.sheets[sheet_name]
                for column_cells in worksheet.columns:
                    width = max(len(str(cell.value)) if cell.value is not None else 0
                                for cell in column_cells)
                    letter = column_cells[0].column_letter
                    worksheet.column_dimensions[letter].width = min(max(width + 2, 10), 80)

        logger.info(f"Arquivo Excel salvo com sucesso: {filepath}")
        return filepath
