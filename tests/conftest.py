#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Pytest configuration and shared fixtures.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest

from hicweaver.assembly_core.data_structures import HiCContactMatrix, make_contigs


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="hicweaver_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def two_pair_matrix():
    """Four contigs of 100 bp: 0-1 share 50 links, 2-3 share 40."""
    contigs = make_contigs(["ctg0", "ctg1", "ctg2", "ctg3"], [100, 100, 100, 100])
    links = np.zeros((4, 4), dtype=np.int64)
    links[0, 1] = links[1, 0] = 50
    links[2, 3] = links[3, 2] = 40
    return HiCContactMatrix(contigs=contigs, links=links)


@pytest.fixture
def two_block_matrix():
    """
    Eight contigs in two linked blocks (0-3 and 4-7) with weak cross links.

    Lengths make the second block longer in total.
    """
    contigs = make_contigs(
        [f"ctg{i}" for i in range(8)],
        [100, 100, 100, 100, 300, 300, 300, 300],
    )
    links = np.ones((8, 8), dtype=np.int64)
    links[:4, :4] = 30
    links[4:, 4:] = 20
    return HiCContactMatrix(contigs=contigs, links=links)


@pytest.fixture
def chain_contigs():
    """Three unit-length contigs A, B, C."""
    return make_contigs(["A", "B", "C"], [1, 1, 1])


@pytest.fixture
def chain_end_links():
    """A tail -> B head -> B tail -> C head, plus a weak A tail - C head link."""
    return {
        ((0, 1), (1, 0)): 10,
        ((1, 1), (2, 0)): 8,
        ((0, 1), (2, 0)): 1,
    }


@pytest.fixture
def ring_end_links():
    """A-B-C joined head to tail in a ring, each node with one weak competitor."""
    return {
        ((0, 1), (1, 0)): 10,
        ((1, 1), (2, 0)): 6,
        ((2, 1), (0, 0)): 4,
        ((0, 1), (2, 0)): 1,
        ((1, 1), (0, 0)): 1,
        ((2, 1), (1, 0)): 1,
    }

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
