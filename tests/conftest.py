"""
Shared fixtures for dep-licenses tests.
"""

from pathlib import Path
from typing import Dict, Optional

import pytest

from dep_licenses.config import reset_config
from dep_licenses.error_handling import setup_error_handling
from dep_licenses.oracle import LicenseOracle, set_license_oracle

MIT_TEXT = """MIT License

Copyright (c) 2024 Jane Doe

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

BSD_3_CLAUSE_TEXT = """BSD 3-Clause License

Copyright (c) 2024, Jane Doe

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

1. Redistributions of source code must retain the above copyright notice, this
   list of conditions and the following disclaimer.

2. Redistributions in binary form must reproduce the above copyright notice,
   this list of conditions and the following disclaimer in the documentation
   and/or other materials provided with the distribution.

3. Neither the name of the copyright holder nor the names of its
   contributors may be used to endorse or promote products derived from
   this software without specific prior written permission.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""

# Reference copies of long licenses, shipped by Debian-based systems
COMMON_LICENSES = Path("/usr/share/common-licenses")


class FakeOracle(LicenseOracle):
    """Oracle that classifies by exact text lookup."""

    def __init__(self, texts: Optional[Dict[str, str]] = None):
        self.texts = texts or {}
        self.calls = []

    def match(self, text: str) -> Optional[str]:
        self.calls.append(text)
        return self.texts.get(text.strip())


@pytest.fixture(autouse=True)
def isolated_globals(tmp_path, monkeypatch):
    """Reset process-wide config, oracle and error handler for each test."""
    monkeypatch.chdir(tmp_path)
    for key in (
        "DEP_LICENSES_LOG_LEVEL",
        "DEP_LICENSES_MAX_FILE_SIZE_MB",
        "DEP_LICENSES_MIN_CONFIDENCE",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    set_license_oracle(None)
    setup_error_handling()
    yield
    reset_config()
    set_license_oracle(None)


@pytest.fixture
def temp_dir(tmp_path):
    """A fresh directory for a dependency checkout."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def mit_text():
    return MIT_TEXT


@pytest.fixture
def bsd3_text():
    return BSD_3_CLAUSE_TEXT


@pytest.fixture
def fake_oracle():
    return FakeOracle()


def _common_license(name: str) -> str:
    path = COMMON_LICENSES / name
    if not path.is_file():
        pytest.skip(f"{path} is not available")
    return path.read_text(encoding="utf-8")


@pytest.fixture
def apache_text():
    return _common_license("Apache-2.0")


@pytest.fixture
def gpl3_text():
    return _common_license("GPL-3")
