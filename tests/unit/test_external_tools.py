"""Tests for the tool wrappers' command lines."""

from pathlib import Path
import sys
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mudoger.external.bbtools import BBTools
from mudoger.external.checkm import CheckM
from mudoger.external.checkv import CheckV
from mudoger.external.eukrep import EukRep
from mudoger.external.gtdbtk import GTDBTk
from mudoger.external.metawrap import MetaWRAP
from mudoger.external.prokka import Prokka
from mudoger.external.wish import WIsH


def _argv(mock_run):
    return [str(a) for a in mock_run.call_args[0][0]]


class TestMetaWRAP:
    """metaWRAP binning and refinement."""

    @patch.object(MetaWRAP, "_check_installation")
    @patch.object(MetaWRAP, "run", return_value=("", ""))
    def test_binning(self, mock_run, mock_check, tmp_path):
        out_dir = tmp_path / "initial-binning"
        MetaWRAP(threads=8).binning(
            tmp_path / "asm.fa", tmp_path / "r_1.fastq", tmp_path / "r_2.fastq", out_dir
        )
        argv = _argv(mock_run)
        assert argv[:2] == ["metawrap", "binning"]
        assert "--metabat2" in argv and "--maxbin2" in argv
        assert argv[argv.index("-t") + 1] == "8"
        assert argv[-2:] == [str(tmp_path / "r_1.fastq"), str(tmp_path / "r_2.fastq")]
        assert out_dir.is_dir()

    @patch.object(MetaWRAP, "_check_installation")
    @patch.object(MetaWRAP, "run", return_value=("", ""))
    def test_refinement_cutoffs(self, mock_run, mock_check, tmp_path):
        MetaWRAP().bin_refinement(
            tmp_path / "a", tmp_path / "b", tmp_path / "out",
            completeness=40, contamination=30, memory_gb=100,
        )
        argv = _argv(mock_run)
        assert argv[argv.index("-c") + 1] == "40"
        assert argv[argv.index("-x") + 1] == "30"
        assert argv[argv.index("-m") + 1] == "100"

    @patch.object(MetaWRAP, "_check_installation")
    @patch.object(MetaWRAP, "run", return_value=("", ""))
    def test_concoct(self, mock_run, mock_check, tmp_path):
        MetaWRAP().concoct_binning(tmp_path / "euk.fa", tmp_path / "1.fq", tmp_path / "2.fq", tmp_path / "bins")
        assert "--concoct" in _argv(mock_run)


class TestQualityAndTaxonomy:
    """CheckM and GTDB-Tk."""

    @patch.object(CheckM, "_check_installation")
    @patch.object(CheckM, "run", return_value=("", ""))
    def test_checkm(self, mock_run, mock_check, tmp_path):
        table = tmp_path / "outputcheckm.tsv"
        assert CheckM(threads=2).lineage_wf(tmp_path / "bins", tmp_path / "qc", table) == table
        argv = _argv(mock_run)
        assert argv[:2] == ["checkm", "lineage_wf"]
        assert "--tab_table" in argv
        assert argv[argv.index("-f") + 1] == str(table)
        assert argv[argv.index("-x") + 1] == "fa"

    @patch.object(GTDBTk, "_check_installation")
    @patch.object(GTDBTk, "run", return_value=("", ""))
    def test_gtdbtk_returns_existing_summaries(self, mock_run, mock_check, tmp_path):
        out_dir = tmp_path / "gtdbtk"
        out_dir.mkdir()
        (out_dir / "gtdbtk.bac120.summary.tsv").write_text("user_genome\tclassification\n")
        summaries = GTDBTk().classify_wf(tmp_path / "bins", out_dir)
        assert [p.name for p in summaries] == ["gtdbtk.bac120.summary.tsv"]
        assert "classify_wf" in _argv(mock_run)


class TestAnnotation:
    """Prokka and BBTools."""

    @patch.object(Prokka, "_check_installation")
    @patch.object(Prokka, "run", return_value=("", ""))
    def test_prokka_prefix(self, mock_run, mock_check, tmp_path):
        Prokka().annotate(tmp_path / "S1-bin.3.fa", tmp_path / "prokka" / "S1-bin.3")
        argv = _argv(mock_run)
        assert argv[argv.index("--prefix") + 1] == "PROKKA_S1-bin.3"
        assert argv[argv.index("--outdir") + 1] == str(tmp_path / "prokka" / "S1-bin.3")

    @patch.object(BBTools, "_check_installation")
    @patch.object(BBTools, "run", return_value=("n_scaffolds\tscaf_bp\n3\t1000\n", ""))
    def test_bbtools_writes_stdout(self, mock_run, mock_check, tmp_path):
        files = [tmp_path / "a.fa", tmp_path / "b.fa"]
        output = BBTools().stats(files, tmp_path / "stats" / "bbtools.tsv")
        assert output.read_text().startswith("n_scaffolds")
        assert _argv(mock_run) == ["statswrapper.sh", str(files[0]), str(files[1])]


class TestViralTools:
    """CheckV and WIsH."""

    @patch.object(CheckV, "_check_installation")
    @patch.object(CheckV, "run", return_value=("", ""))
    def test_checkv(self, mock_run, mock_check, tmp_path):
        summary = CheckV().end_to_end(tmp_path / "uvigs.fa", tmp_path / "checkv")
        assert summary == tmp_path / "checkv" / "quality_summary.tsv"
        assert _argv(mock_run)[:2] == ["checkv", "end_to_end"]

    @patch.object(WIsH, "_check_installation")
    @patch.object(WIsH, "run", return_value=("", ""))
    def test_wish_null_parameters(self, mock_run, mock_check, tmp_path):
        tool = WIsH()
        tool.predict(tmp_path / "v", tmp_path / "m", tmp_path / "r")
        assert "-n" not in _argv(mock_run)
        prediction = tool.predict(tmp_path / "v", tmp_path / "m", tmp_path / "r", null_parameters=tmp_path / "null.tsv")
        argv = _argv(mock_run)
        assert argv[-2:] == ["-n", str(tmp_path / "null.tsv")]
        assert prediction == tmp_path / "r" / "prediction.list"

    @patch.object(WIsH, "_check_installation")
    @patch.object(WIsH, "run", return_value=("", ""))
    def test_wish_build(self, mock_run, mock_check, tmp_path):
        WIsH().build(tmp_path / "hosts", tmp_path / "model")
        argv = _argv(mock_run)
        assert argv[argv.index("-c") + 1] == "build"
        assert argv[argv.index("-g") + 1] == f"{tmp_path / 'hosts'}/"


class TestEukRep:
    """EukRep contig sorting."""

    @patch.object(EukRep, "_check_installation")
    @patch.object(EukRep, "run", return_value=("", ""))
    def test_sort_contigs(self, mock_run, mock_check, tmp_path):
        euk = tmp_path / "eukrep" / "eukaryotic_contigs.fa"
        EukRep().sort_contigs(tmp_path / "asm.fa", euk, tmp_path / "eukrep" / "prok.fa")
        argv = _argv(mock_run)
        assert argv[argv.index("-o") + 1] == str(euk)
        assert argv[argv.index("--prokarya") + 1] == str(tmp_path / "eukrep" / "prok.fa")
        assert euk.parent.is_dir()
