from .parser import extract_genotypes, normalize_genotype

__all__ = ["extract_genotypes", "normalize_genotype"]
