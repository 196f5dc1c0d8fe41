"""
HiCWeaver v0.1.0

I/O Module for HiCWeaver.

hic_io.py - contig registries, contact matrices, end links, cluster and tour files
"""

from .hic_io import (
    load_contigs_tsv,
    load_contact_matrix,
    load_end_links,
    write_clusters_file,
    parse_clusters_file,
    write_tour_file,
    parse_tour_file,
)

__all__ = [
    "load_contigs_tsv",
    "load_contact_matrix",
    "load_end_links",
    "write_clusters_file",
    "parse_clusters_file",
    "write_tour_file",
    "parse_tour_file",
]
