# spoolproxy

`spoolproxy` is a small HTTP server that speaks part of the Spoolman API while
keeping InvenTree as the single source of truth for your filament. Clients that
talk to Spoolman can list spools, look one up and report filament usage;
`spoolproxy` answers from InvenTree stock items and parts and books the
consumption back in InvenTree.

## How it works

- Every stock item in the configured InvenTree part category is one **spool**.
  Its part is the **filament**. Stock items whose part is not in that category
  are left out of the spool list.
- Filament properties come from part parameters, looked up by template name
  (see `spoolproxy.parameters.ParameterSettings`): `3DPrint Filament Density`,
  `3DPrint Filament Diameter`, `3DPrint Filament Material`,
  `3DPrint Filament Color`, `3DPrint Extruder Temperature`,
  `3DPrint Bed Temperature` and `3DPrint Spool Weight`. Missing density,
  diameter and material fall back to 1.24 g/cm³, 1.75 mm and `PLA`. Colours
  are returned in lower case without a leading `#`.
- The full spool weight is the supplier part's native pack quantity; the stock
  quantity is the remaining weight in grams. A stock item without supplier part
  detail cannot be turned into a spool and the request fails with status 500.
  Lengths are derived from weight, density and diameter.
- Reported usage is not sent to InvenTree at once. It is added up in a local
  SQLite table and subtracted (never below zero) from the remaining weight of
  every spool the server returns. A background job runs when the server starts
  and then every 60 seconds; it books each spool's pending usage in InvenTree
  through a stock removal once the spool has been left alone for two minutes,
  then resets it to zero. Pending usage for stock items that no longer exist in
  InvenTree is dropped.

## Installation

```console
pip install spoolproxy
```

## Running

```console
spoolproxy --inventree-url https://inventree.example.com \
           --inventree-token token \
           --category-id 31
```

| Option              | Environment variable     | Default            |
|---------------------|--------------------------|--------------------|
| `--inventree-url`   | `INVENTREE_URL`          | required           |
| `--inventree-token` | `INVENTREE_TOKEN`        | required           |
| `--category-id`     | `INVENTREE_CATEGORY_ID`  | required           |
| `--db`              | `SQLITE_DB_PATH`         | `sqlite://data.db` |
| `--host`            |                          | all addresses      |
| `--port`            |                          | `4000`             |
| `--log-level`       | `LOG_LEVEL`              | `info`             |

Without `--host` the server listens on `0.0.0.0` and, where the system has
IPv6, on `::` as well. The SQLite database is created if it does not exist.

## Endpoints

All routes live under `/api/v1`:

| Method | Path                     | Purpose                                                   |
|--------|--------------------------|-----------------------------------------------------------|
| GET    | `/health`                | Returns `{"status": "healthy"}`.                          |
| GET    | `/info`                  | Version and server information.                           |
| POST   | `/backup`                | Answers `{"path": "NOT IMPLEMENTED"}`; no backup is made. |
| GET    | `/spool`                 | All spools in the filament category.                      |
| GET    | `/spool/{spool_id}`      | One spool, by InvenTree stock item id.                    |
| PUT    | `/spool/{spool_id}/use`  | Report usage with `use_weight` (g) or `use_length` (mm).  |

`/spool` also accepts a WebSocket connection; incoming messages are read and
ignored, and no events are sent.

A usage report needs at least one of the two fields; otherwise the server
answers `400` with `{"message": "Either use_length or use_weight must be provided"}`.
When both are given, `use_weight` wins. Other failures, such as an error from
InvenTree, are answered with `500` and a `message`. Unknown paths get a plain
`404 Not Found`.

```console
curl -X PUT http://localhost:4000/api/v1/spool/42/use \
     -H 'Content-Type: application/json' \
     -d '{"use_length": 1500}'
```

## What it does not do

- There are no filament, vendor or settings endpoints, and no OpenAPI or
  Swagger documentation.
- Each filament carries a placeholder vendor with id `0` and name `Unknown`.
- `/backup` does not back anything up.
- The parameter template names can only be changed from Python, through
  `AppConfig.parameters`.

## Using the pieces from Python

The InvenTree client can be used on its own:

```python
import asyncio

from spoolproxy.inventree import InventreeApiClient, StockListQuery


async def show_stock() -> None:
    async with InventreeApiClient("https://inventree.example.com", "token") as client:
        items = await client.stock().list(StockListQuery(category=31, location_detail=True))
        for item in items:
            print(item.pk, item.quantity)


asyncio.run(show_stock())
```

- `spoolproxy.spool.Spool.from_inventree` turns a stock item and its part into
  a spool; `Spool.to_dict` gives its JSON form.
- `spoolproxy.db.DbClient` holds the pending usage table.
- `spoolproxy.flush.flush_spool_usage_to_inventree` performs one flush run and
  returns the ids of the spools it booked.
- `spoolproxy.app.create_app(context, config)` builds the Starlette
  application for embedding in another ASGI server; set
  `AppConfig.flush_interval` to `None` to run it without the background job.

## Development

```console
pip install -e '.[test]'
pytest
```