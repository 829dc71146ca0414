#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
check command - looks for empty folders, track numbering gaps and
disagreements between the filesystem and track metadata.
"""

import argparse
from typing import List, Optional

from ..library import search
from ..library.model import Library
from ..library.search import SearchSettings
from .base import BaseCommand, Flag
from .issues import (
    CheckedArtist,
    empty_folder_issues,
    gap_analysis,
    integrity_analysis,
    merge,
    render,
)


class CheckCommand(BaseCommand):
    """Runs the selected analyses and reports their merged findings"""

    FLAGS = [
        Flag("empty", bool, False, "check for empty artist and album folders"),
        Flag("gaps", bool, False, "check for gaps in track numbers"),
        Flag("integrity", bool, True, "check for disagreement between the file system and audio file metadata"),
    ]
    USES_SEARCH_FLAGS = True

    @property
    def name(self) -> str:
        return "check"

    def execute(self, options: argparse.Namespace) -> bool:
        if not (options.empty or options.gaps or options.integrity):
            self.report_nothing_to_do(options)
            return False
        settings = self.search_settings(options)
        self.log_start(options)

        empty_tree: List[CheckedArtist] = []
        unfiltered = None
        if options.empty:
            unfiltered = search.load_unfiltered(settings, self.bus)
            if unfiltered.is_empty:
                return False
            empty_tree, found = empty_folder_issues(unfiltered)
            if not found:
                self.bus.write_console("Empty Folder Analysis: no empty folders found")

        gap_tree: List[CheckedArtist] = []
        integrity_tree: List[CheckedArtist] = []
        if options.gaps or options.integrity:
            library = self.filtered(settings, unfiltered)
            if library is None:
                return False
            if options.gaps:
                gap_tree, found = gap_analysis(library)
                if not found:
                    self.bus.write_console("Check Gaps: no gaps found")
            if options.integrity:
                integrity_tree, found = integrity_analysis(library)
                if not found:
                    self.bus.write_console("Integrity Analysis: no issues found")

        for line in render(merge(empty_tree, gap_tree, integrity_tree)):
            self.bus.write_console(line)
        return True

    def filtered(self, settings: SearchSettings, unfiltered: Optional[Library]) -> Optional[Library]:
        """Filtered view, reusing the unfiltered load when there is one"""
        if unfiltered is None:
            return self.load_library(settings)
        library = search.filter_library(unfiltered, settings, self.bus)
        return None if library.is_empty else library
