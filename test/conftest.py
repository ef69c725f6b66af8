#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""Shared pytest fixtures for make trace graph tests.

The trace fixtures are transcripts in the exact shape GNU make 4.x prints for
``make -nd``: debug messages indented by one space per recursion level, recipe
lines printed unindented after "Must remake target".

Fixture Complexity Levels:
- tiny: 1-3 targets, exercises one parser rule
- small: 5-8 targets, realistic Makefiles (echo targets, C compilation)
"""

import sys
import tempfile
import shutil
from pathlib import Path
from typing import Generator
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = tempfile.mkdtemp(prefix="maketrace_test_")
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def echo_trace() -> str:
    """Trace of a Makefile whose goal test.txt depends on echo targets a, b and c.

    Makefile:
        test.txt: a b c
        	# write the test file
        	echo a b c > test.txt
        a:
        	echo a
        b:
        	echo b
        c:
        	echo c
        	echo multi
        	echo line

    Includes make's self-check of Makefile (skipped by the parser) and parallel
    job bookkeeping lines inside the test.txt command block.
    """
    return """GNU Make 4.3
Built for x86_64-pc-linux-gnu
Copyright (C) 1988-2020 Free Software Foundation, Inc.
License GPLv3+: GNU GPL version 3 or later <http://gnu.org/licenses/gpl.html>
This is free software: you are free to change and redistribute it.
There is NO WARRANTY, to the extent permitted by law.
Reading makefiles...
Reading makefile 'Makefile'...
Updating makefiles....
 Considering target file 'Makefile'.
  Looking for an implicit rule for 'Makefile'.
  Trying pattern rule with stem 'Makefile'.
  Trying implicit prerequisite 'Makefile.o'.
  No implicit rule found for 'Makefile'.
  Finished prerequisites of target file 'Makefile'.
 No need to remake target 'Makefile'.
Updating goal targets....
Considering target file 'test.txt'.
 File 'test.txt' does not exist.
  Considering target file 'a'.
   File 'a' does not exist.
   Finished prerequisites of target file 'a'.
  Must remake target 'a'.
echo a
  Successfully remade target file 'a'.
  Considering target file 'b'.
   File 'b' does not exist.
   Finished prerequisites of target file 'b'.
  Must remake target 'b'.
echo b
  Successfully remade target file 'b'.
  Considering target file 'c'.
   File 'c' does not exist.
   Finished prerequisites of target file 'c'.
  Must remake target 'c'.
echo c
echo multi
echo line
  Successfully remade target file 'c'.
 Finished prerequisites of target file 'test.txt'.
Must remake target 'test.txt'.
# write the test file
echo a b c > test.txt
Putting child 0x5581b0c3e2f0 (test.txt) PID 31337 on the chain.
Live child 0x5581b0c3e2f0 (test.txt) PID 31337
Reaping winning child 0x5581b0c3e2f0 PID 31337
Removing child 0x5581b0c3e2f0 PID 31337 from chain.
Successfully remade target file 'test.txt'.
"""


@pytest.fixture
def c_compile_trace() -> str:
    """Trace of the classic hellomake C project.

    Makefile:
        CC=gcc
        CFLAGS=-I.
        DEPS = hellomake.h

        %.o: %.c $(DEPS)
        	$(CC) -c -o $@ $< $(CFLAGS)

        hellomake: hellomake.o hellofunc.o
        	$(CC) -o hellomake hellomake.o hellofunc.o

    hellomake.h is considered under hellomake.o and pruned under hellofunc.o.
    """
    return """GNU Make 4.3
Built for x86_64-pc-linux-gnu
Reading makefiles...
Reading makefile 'Makefile'...
Updating makefiles....
 Considering target file 'Makefile'.
  Looking for an implicit rule for 'Makefile'.
  Trying pattern rule with stem 'Makefile'.
  Trying implicit prerequisite 'Makefile.c'.
  Trying pattern rule with stem 'Makefile'.
  Trying implicit prerequisite 'Makefile.o'.
  No implicit rule found for 'Makefile'.
  Finished prerequisites of target file 'Makefile'.
 No need to remake target 'Makefile'.
Updating goal targets....
Considering target file 'hellomake'.
 File 'hellomake' does not exist.
  Considering target file 'hellomake.o'.
   File 'hellomake.o' does not exist.
   Looking for an implicit rule for 'hellomake.o'.
   Trying pattern rule with stem 'hellomake'.
   Trying implicit prerequisite 'hellomake.c'.
   Trying rule prerequisite 'hellomake.h'.
   Found an implicit rule for 'hellomake.o'.
    Considering target file 'hellomake.c'.
     Looking for an implicit rule for 'hellomake.c'.
     Trying pattern rule with stem 'hellomake'.
     Trying implicit prerequisite 'hellomake.y'.
     No implicit rule found for 'hellomake.c'.
     Finished prerequisites of target file 'hellomake.c'.
    No need to remake target 'hellomake.c'.
    Considering target file 'hellomake.h'.
     Looking for an implicit rule for 'hellomake.h'.
     No implicit rule found for 'hellomake.h'.
     Finished prerequisites of target file 'hellomake.h'.
    No need to remake target 'hellomake.h'.
   Finished prerequisites of target file 'hellomake.o'.
  Must remake target 'hellomake.o'.
gcc -c -o hellomake.o hellomake.c -I.
  Successfully remade target file 'hellomake.o'.
  Considering target file 'hellofunc.o'.
   File 'hellofunc.o' does not exist.
   Looking for an implicit rule for 'hellofunc.o'.
   Trying pattern rule with stem 'hellofunc'.
   Trying implicit prerequisite 'hellofunc.c'.
   Trying rule prerequisite 'hellomake.h'.
   Found an implicit rule for 'hellofunc.o'.
    Considering target file 'hellofunc.c'.
     Looking for an implicit rule for 'hellofunc.c'.
     No implicit rule found for 'hellofunc.c'.
     Finished prerequisites of target file 'hellofunc.c'.
    No need to remake target 'hellofunc.c'.
    Pruning file 'hellomake.h'.
   Finished prerequisites of target file 'hellofunc.o'.
  Must remake target 'hellofunc.o'.
gcc -c -o hellofunc.o hellofunc.c -I.
  Successfully remade target file 'hellofunc.o'.
 Finished prerequisites of target file 'hellomake'.
Must remake target 'hellomake'.
gcc -o hellomake hellomake.o hellofunc.o
Successfully remade target file 'hellomake'.
"""


@pytest.fixture
def diamond_trace() -> str:
    """Trace where x and y both depend on common (common is pruned under y).

    Makefile:
        all: x y
        x: common
        y: common
        common:
        	echo common
    """
    return """Updating goal targets....
Considering target file 'all'.
 File 'all' does not exist.
  Considering target file 'x'.
   File 'x' does not exist.
    Considering target file 'common'.
     File 'common' does not exist.
     Finished prerequisites of target file 'common'.
    Must remake target 'common'.
echo common
    Successfully remade target file 'common'.
   Finished prerequisites of target file 'x'.
  Must remake target 'x'.
  Successfully remade target file 'x'.
  Considering target file 'y'.
   File 'y' does not exist.
    Pruning file 'common'.
   Finished prerequisites of target file 'y'.
  Must remake target 'y'.
  Successfully remade target file 'y'.
 Finished prerequisites of target file 'all'.
Must remake target 'all'.
Successfully remade target file 'all'.
"""
