# patchman

Helpers for a patch management API that lists systems, their installed
packages and the advisories that apply to them, plus a small HTTP server that
mocks the platform services such an API talks to. Only the standard library is
used.

## Modules

- `patchman.paging`: `Links`, `ListMeta` and `Pager`, and `create_links`,
  which builds the first, last, next and previous page links from a path, an
  offset, a limit, a total and any extra query parameters. Empty extra
  parameters are skipped. `Links.to_dict()` and `ListMeta.to_dict()` give the
  JSON shape of the response metadata.
- `patchman.querymap`: `QueryMap` and `QueryList`, plus `nested_query` and
  `nested_query_from_url`. These turn parameters such as
  `filter[system_profile][sap_sids][in][]=ABC` into a nested mapping. The
  `walk()` method yields `(path, value)` pairs, and `path()` and
  `get_path()` look up a subtree.
- `patchman.filters`: `FilterData` (an operator and its values), plus
  `append_filter_data` and `merge_filters`.
- `patchman.tags`: `parse_tag` (`namespace/key[=value]`, raising
  `InvalidTagError`) and `Tag.sql_condition()`. `parse_tags`,
  `parse_system_profile_filters` and `parse_tags_filters` collect filters.
  `tags_filter_conditions` turns those filters into an SQL condition with `?`
  placeholders and parameters. `build_profile_query` builds
  `h.system_profile` conditions. `extract_tags_query_string` and `has_tags`
  round out the module.
- `patchman.listing`: `apply_sort` turns a `sort` parameter into
  `ORDER BY` clauses. `validate_filters`, `search_condition` and
  `check_filter_in_url` handle filters and search. All of them raise
  `ListError` on invalid input.
- `patchman.systems`: `SystemTag`, `parse_system_tags` and `format_tags`
  (compact JSON with single quotes, as written in CSV exports).
  `system_subtotals` builds the subtotals, `default_filters` gives the
  default filter (only non-stale systems), and `DEFAULT_SORT` is
  `-last_upload`.
- `patchman.views`: `SystemsAdvisoriesRequest.from_json`, plus
  `group_system_advisories` and `group_advisory_systems` for
  `(system, advisory)` pairs.
- `patchman.exports`: `negotiate_export` picks JSON or CSV from an
  `Accept` header and raises `UnsupportedMediaType` otherwise. `write_csv`
  writes a header line plus one line per row. `latest_evra`,
  `inline_packages` and `parse_json_list` cover package versions and JSON
  lists. The column lists are `PACKAGE_FIELDS`, `SYSTEM_PACKAGE_FIELDS` and
  `SYSTEM_ADVISORY_FIELDS`.
- `patchman.rbac`: `Permissions`, `permissions_from_access` and
  `is_method_allowed`. `GET` and `POST` need read access; `PUT` and `DELETE`
  need write access. `unify_url` replaces route parameter values with
  `:name` for metric labels.
- `patchman.platform_data`: canned data. It includes the inventory upload and
  delete events, a base64 identity, the RBAC access list and the VMaaS
  updates, patches, errata, package list and repositories.
- `patchman.platform_server`: `PlatformMock`, `serve` and `main`.

## Example

```python
from patchman.paging import create_links
from patchman.tags import parse_tag

links = create_links("/api/patch/v2/systems", 0, 20, 45, "sort=-last_upload")
print(links.to_dict())

print(parse_tag("ns1/k1=val1"))  # Tag(namespace='ns1', key='k1', value='val1')
```

## Mock platform

```
patchman-platform --port 9001 --rbac-permissions "patch:*:read"
```

The port defaults to 9001. Without `--rbac-permissions`, the permission comes
from `$RBAC_PERMISSIONS`, or is `patch:*:read` if that is unset.

The server answers these routes:

- `POST /api/v3/updates`, `/api/v3/patches`, `/api/v3/errata`,
  `/api/v3/repos` and `/api/v3/pkglist` return canned VMaaS data.
- `GET /api/rbac/v1/access` returns the access list.
- `GET /ws` is a websocket. It sends `webapps-refreshed` after each sync.
- `POST /control/upload` and `/control/delete` emit an inventory event.
- `POST /control/sync` notifies the websocket clients.
- `POST /control/toggle_upload` switches a loop on or off. While the loop is
  on, it emits an upload event with a random package list every 10 ms.

Responses are gzip-compressed when the client accepts gzip.

Inventory events are written to standard output as JSON lines of the form
`{"topic": ..., "value": ...}`. When `PlatformMock` is used directly, the
events go to whatever `send(topic, message)` callable you pass it.

## What this package does not do

It has no database layer and no message-queue client. It also does not serve
the patch API itself: the helpers build SQL fragments, links and export
output, but do not run queries or route requests.

## Tests

```
pip install -e .[test]
pytest
```