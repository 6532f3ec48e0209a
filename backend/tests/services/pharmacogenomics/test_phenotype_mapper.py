"""
Unit tests for the phenotype mapper and per-gene resolution.
Tests display genotypes, severity ranking and order independence.
"""

import itertools
import random
from types import MappingProxyType

import pytest

from app.services.pharmacogenomics.annotation_table import ANNOTATION_TABLE, VariantDefinition
from app.services.pharmacogenomics.phenotype_mapper import (
    PhenotypeMapper,
    phenotype_priority,
    render_display_genotype,
    resolve_gene_findings,
)


def _by_gene(findings):
    return {f.gene: f for f in findings}


class TestRenderDisplayGenotype:

    @pytest.mark.parametrize("gt,expected", [
        ("0/0", "*1/*1"),
        ("0/1", "*1/*4"),
        ("1/1", "*4/*4"),
        ("1/2", "*4/?"),
        ("1/0", "*4/?"),
        ("./.", "*1/*1"),
        (".", "*1/*1"),
    ])
    def test_display(self, gt, expected):
        assert render_display_genotype(gt, "*4") == expected


class TestPhenotypePriority:

    def test_ranking(self):
        assert phenotype_priority("Poor Metabolizer") == phenotype_priority("Poor Function") == 5
        assert phenotype_priority("Ultrarapid Metabolizer") == phenotype_priority("Rapid Metabolizer") == 4
        assert phenotype_priority("Intermediate Metabolizer") == phenotype_priority("Decreased Function") == 3
        assert phenotype_priority("Normal Metabolizer") == phenotype_priority("Normal Function") == 1

    def test_unranked_labels_score_zero(self):
        assert phenotype_priority("High Sensitivity") == 0
        assert phenotype_priority("Something Else") == 0


class TestPhenotypeMapper:

    @pytest.fixture
    def mapper(self):
        return PhenotypeMapper()

    def test_empty_observation_is_all_normal(self, mapper):
        findings = mapper.resolve({})

        assert len(findings) == 9
        for f in findings:
            assert f.genotype == "*1/*1"
            assert f.raw_gt == "0/0"
            assert f.phenotype == ANNOTATION_TABLE[f.rsid].normal_phenotype

    def test_one_finding_per_gene(self, mapper):
        findings = mapper.resolve({rsid: "1/1" for rsid in ANNOTATION_TABLE})
        genes = [f.gene for f in findings]
        assert len(genes) == len(set(genes))

    def test_heterozygous_star4(self, mapper):
        cyp2d6 = _by_gene(mapper.resolve({"rs3892097": "0/1"}))["CYP2D6"]

        assert cyp2d6.rsid == "rs3892097"
        assert cyp2d6.genotype == "*1/*4"
        assert cyp2d6.phenotype == "Intermediate Metabolizer"
        assert cyp2d6.confidence_score == 0.99
        assert cyp2d6.evidence_level == "Level 1A"

    def test_more_severe_variant_wins(self, mapper):
        # *10 homozygous is Intermediate; *4 homozygous is Poor
        cyp2d6 = _by_gene(mapper.resolve({"rs1065852": "1/1", "rs3892097": "1/1"}))["CYP2D6"]
        assert cyp2d6.rsid == "rs3892097"
        assert cyp2d6.phenotype == "Poor Metabolizer"

    def test_later_more_severe_variant_replaces_earlier(self, mapper):
        cyp2c19 = _by_gene(mapper.resolve({"rs12248560": "0/1", "rs4244285": "1/1"}))["CYP2C19"]
        assert cyp2c19.rsid == "rs4244285"
        assert cyp2c19.genotype == "*2/*2"
        assert cyp2c19.phenotype == "Poor Metabolizer"

    def test_tie_keeps_first(self, mapper):
        cyp2d6 = _by_gene(mapper.resolve({"rs3892097": "0/1", "rs1065852": "0/1"}))["CYP2D6"]
        assert cyp2d6.rsid == "rs3892097"

    def test_unmapped_code_uses_normal_phenotype(self, mapper):
        cyp2d6 = _by_gene(mapper.resolve({"rs3892097": "1/2"}))["CYP2D6"]
        assert cyp2d6.genotype == "*4/?"
        assert cyp2d6.phenotype == "Normal Metabolizer"

    def test_genes_in_discovery_order(self, mapper):
        genes = [f.gene for f in mapper.resolve({})]
        assert genes == [
            "CYP2D6", "CYP2C19", "CYP2C9", "SLCO1B1", "DPYD",
            "TPMT", "VKORC1", "NUDT15", "CYP4F2",
        ]


class TestOrderIndependence:

    def _shuffled_table(self, seed):
        items = list(ANNOTATION_TABLE.items())
        random.Random(seed).shuffle(items)
        return MappingProxyType(dict(items))

    @pytest.mark.parametrize("seed", range(5))
    def test_phenotype_independent_of_table_order(self, seed):
        observed = {
            "rs3892097": "0/1", "rs1065852": "1/1",
            "rs12248560": "1/1", "rs4244285": "0/1",
            "rs4149056": "0/1",
        }
        baseline = {g: f.phenotype for g, f in _by_gene(resolve_gene_findings(observed)).items()}
        shuffled = {
            g: f.phenotype
            for g, f in _by_gene(resolve_gene_findings(observed, self._shuffled_table(seed))).items()
        }
        assert shuffled == baseline

    def test_severity_tie_keeps_first_variant_in_table_order(self):
        observed = {"rs3892097": "0/1", "rs1065852": "0/1"}
        star4_first = {rsid: ANNOTATION_TABLE[rsid] for rsid in ("rs3892097", "rs1065852")}
        star10_first = {rsid: ANNOTATION_TABLE[rsid] for rsid in ("rs1065852", "rs3892097")}

        (a,) = resolve_gene_findings(observed, star4_first)
        (b,) = resolve_gene_findings(observed, star10_first)

        assert a.phenotype == b.phenotype == "Intermediate Metabolizer"
        assert (a.rsid, a.genotype) == ("rs3892097", "*1/*4")
        assert (b.rsid, b.genotype) == ("rs1065852", "*1/*10")

    def test_all_permutations_of_one_gene(self):
        defs = [
            VariantDefinition("rsA", "G", "*2", "x", "Level 1A", 0.9,
                              {"0/0": "Normal Metabolizer", "0/1": "Intermediate Metabolizer", "1/1": "Poor Metabolizer"}),
            VariantDefinition("rsB", "G", "*17", "x", "Level 1A", 0.9,
                              {"0/0": "Normal Metabolizer", "0/1": "Rapid Metabolizer", "1/1": "Ultrarapid Metabolizer"}),
            VariantDefinition("rsC", "G", "*9", "x", "Level 1A", 0.9,
                              {"0/0": "Normal Metabolizer", "0/1": "Intermediate Metabolizer", "1/1": "Intermediate Metabolizer"}),
        ]
        observed = {"rsA": "1/1", "rsB": "1/1", "rsC": "0/1"}
        for perm in itertools.permutations(defs):
            table = {d.rsid: d for d in perm}
            (finding,) = resolve_gene_findings(observed, table)
            assert finding.phenotype == "Poor Metabolizer"
            assert finding.rsid == "rsA"
