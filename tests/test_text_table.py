"""Tests for the organism text dump parser."""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from eupathdb.io.text_table import clean_column_name, marker_value, parse_text_table

DUMP = (
    "TABLE: GO Terms\n"
    "[GO ID]\t[Ontology]\t[GO Term Name]\n"
    "GO:0000000\tBiological Process\torphan block\n"
    "\n"
    "Gene ID: LmjF.01.0010\n"
    "product: hypothetical protein\n"
    "\n"
    "TABLE: GO Terms\n"
    '[GO ID]\t[Ontology]\t[GO Term Name]\n'
    "GO:0007018\tBiological Process\tmicrotubule-based movement\n"
    "GO:0005515\tMolecular Function\tprotein binding\n"
    "\n"
    "TABLE: GO Terms (Curated)\n"
    "[GO ID]\t[Ontology]\t[GO Term Name]\n"
    "GO:0009999\tCellular Component\tcurated only\n"
    "\n"
    "TABLE: Pathways\n"
    "[Pathway]\t[Source]\n"
    "ec00010\tKEGG\n"
    "\n"
    "Gene ID: LmjF.01.0 020\n"
    "TABLE: GO Terms\n"
    "[GO ID]\t[Ontology]\t[GO Term Name]\n"
    "\n"
    "Gene ID: LmjF.01.0030\n"
    "TABLE: GO Terms\n"
    "[GO ID]\t[Ontology]\t[GO Term Name]\n"
    "GO:0003777\tMolecular Function\tmicrotubule motor activity"
)


@pytest.fixture()
def dump_file(tmp_path: Path) -> Path:
    path = tmp_path / "LmajorFriedlin_Genes.txt"
    path.write_text(DUMP, encoding="utf-8")
    return path


def test_marker_value_strips_spaces() -> None:
    assert marker_value("Gene ID: LmjF.01.0 010\n") == "LmjF.01.0010"


def test_clean_column_name() -> None:
    assert clean_column_name("[GO ID]") == "GO ID"
    assert clean_column_name("[Ontology] ") == "Ontology"
    assert clean_column_name("Source") == "Source"


def test_parse_text_table(dump_file: Path) -> None:
    frame = parse_text_table(dump_file, "GO Terms")

    assert frame["GID"].tolist() == ["LmjF.01.0010", "LmjF.01.0010", "LmjF.01.0030"]
    assert list(frame.columns) == ["GID", "GO ID", "Ontology", "GO Term Name"]
    assert frame["GO ID"].tolist() == ["GO:0007018", "GO:0005515", "GO:0003777"]


def test_parse_text_table_other_section(dump_file: Path) -> None:
    frame = parse_text_table(dump_file, "Pathways")

    assert list(frame.columns) == ["GID", "Pathway", "Source"]
    assert frame.iloc[0].tolist() == ["LmjF.01.0010", "ec00010", "KEGG"]


def test_parse_gzipped_dump(tmp_path: Path) -> None:
    path = tmp_path / "LmajorFriedlin_Genes.txt.gz"
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        handle.write(DUMP)

    frame = parse_text_table(path, "GO Terms")

    assert len(frame) == 3


def test_missing_table_gives_empty_frame(dump_file: Path) -> None:
    frame = parse_text_table(dump_file, "Orthologs")

    assert frame.empty
    assert list(frame.columns) == []


def test_longer_section_names_do_not_match(dump_file: Path) -> None:
    frame = parse_text_table(dump_file, "GO Terms")

    assert "GO:0009999" not in set(frame["GO ID"])


def test_block_before_first_gene_is_skipped(dump_file: Path) -> None:
    frame = parse_text_table(dump_file, "GO Terms")

    assert frame["GID"].notna().all()
    assert "GO:0000000" not in set(frame["GO ID"])
