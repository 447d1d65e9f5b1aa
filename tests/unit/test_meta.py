# Copyright (c) "Neo4j"
# Neo4j Sweden AB [https://neo4j.com]
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


import querybuilder
from querybuilder import _meta


def test_version_is_exposed() -> None:
    assert querybuilder.__version__ == _meta.version
    assert _meta.package == "querybuilder"


def test_public_names() -> None:
    assert sorted(querybuilder.__all__) == [
        "Query", "QueryBuilder", "__version__"
    ]
    for name in querybuilder.__all__:
        assert hasattr(querybuilder, name)
