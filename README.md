# critscore

`critscore` computes a *criticality score* for open source projects from
records of named numeric values. It also provides building blocks for
gathering such values reliably from GitHub and for writing small command-line
tools around them.

It provides:

- **A configurable scorer** (`critscore.scorer`). The scoring algorithm is
  described in YAML and built at runtime. The bundled algorithm is a weighted
  arithmetic mean (`weighted_arithmetic_mean`) over normalised inputs. You can
  clamp an input to bounds and invert it when smaller values are better. You
  can pass it through a `linear` or `zipfian` distribution, and make it depend
  on whether another field exists.
- **A retrying HTTP transport** for `httpx` (`critscore.retry`). It retries
  according to pluggable strategies, honours delays requested by the server and
  backs off between attempts.
- **GitHub helpers** (`critscore.githubapi`):
  - retry strategies for GitHub's secondary rate limits and spurious server
    errors;
  - GraphQL error detection, including `NOT_FOUND`;
  - batched GraphQL queries;
  - cursor-based pagination.
- **Command-line plumbing**:
  - environment-variable defaults for `argparse` flags;
  - opening input files or stdin;
  - opening output files safely;
  - logger set-up;
  - a small thread-based worker pool.

## Installation

Install the package from a checkout of this project with your usual installer.
It needs Python 3.10 or newer and depends on `httpx` and `pyyaml`. The tests
use `pytest` and are available through the `test` extra.

## Scoring

A scoring configuration names an algorithm and lists its inputs:

```yaml
algorithm: weighted_arithmetic_mean
inputs:
  - field: legacy.created_since
    weight: 1
    bounds:
      upper: 120
    distribution: zipfian

  - field: legacy.updated_since
    weight: 1
    bounds:
      upper: 120
      smaller_is_better: yes
    distribution: zipfian

  - field: legacy.contributor_count
    weight: 2
    bounds:
      upper: 5000
    distribution: zipfian

  - field: legacy.github_mention_count
    weight: 2
    condition:
      not:
        field_exists: legacy.dependent_count
```

Each input takes these keys:

| Key | Required | Default | Notes |
| --- | --- | --- | --- |
| `field` | yes | | |
| `weight` | no | `1` | Must be greater than zero. |
| `distribution` | no | `linear` | |
| `bounds` | no | | Takes `lower` and `upper` (both default to `0`) and `smaller_is_better`. |
| `condition` | no | | Sets exactly one of `field_exists` or `not`. |
| `tags` | no | | A list of strings. |

An invalid configuration raises `ConfigError`. An unknown algorithm name also
raises an error.

Load the configuration and score a record of raw string values:

```python
from critscore.scorer import from_config, name_from_filepath

path = "config/pike.yml"
with open(path) as stream:
    scorer = from_config(name_from_filepath(path), stream)

print(scorer.name)  # "pike_score"
score = scorer.score_raw({
    "legacy.created_since": "48",
    "legacy.updated_since": "2",
    "legacy.contributor_count": "310",
    "legacy.github_mention_count": "not a number",  # ignored
})
```

`score_raw` skips values that cannot be parsed as numbers. An input does not
count towards the total weight if its field is missing from the record or its
condition fails. If no input has a value, the score is NaN.

`name_from_filepath` builds a score name from a file path. It drops the
directory and the extension, lower-cases letters, and turns every character
that is not a letter or digit into `_`. Then it appends `_score`.

The building blocks in `critscore.values` and `critscore.algorithm` are also
usable on their own:

```python
from critscore.values import Bounds, Field, Input, lookup_distribution
from critscore.algorithm import WeightedArithmeticMean

inputs = [
    Input(source=Field("stars"), weight=1, distribution=lookup_distribution("linear"),
          bounds=Bounds(lower=0, upper=10)),
]
print(WeightedArithmeticMean(inputs).score({"stars": 5}))  # 0.5
```

`ConditionalValue`, `exists_condition` and `not_condition` make an input
depend on other fields. A `Registry` maps algorithm names to factories.

## Retrying HTTP requests

`critscore.retry.RetryTransport` wraps any `httpx` transport. Its behaviour is
configured with `Options`:

- `max_retries` defaults to 5.
- `initial_delay` defaults to 120 seconds.
- `backoff` defaults to `default_backoff`. This doubles the delay, or starts
  it at 60 seconds.
- `retry_after` sets a function that returns the delay the server asked for.
- `strategies` holds the functions that decide on a `RetryStrategy`.

Responses with a 2xx or 3xx status are returned at once. A `Request` that is
attempted after it is done raises `NoMoreAttemptsError`.

For GitHub, `new_retry_transport` sets the strategies up:

```python
import logging
import httpx
from critscore.githubapi.roundtripper import new_retry_transport
from critscore.githubapi.client import Client, batch_query

transport = new_retry_transport(httpx.HTTPTransport(), logging.getLogger("github"))
client = Client(transport)

results = batch_query(client, {
    "repo_a": 'repository(owner: "example", name: "a") { stargazerCount }',
    "repo_b": 'repository(owner: "example", name: "b") { stargazerCount }',
})
```

This transport does the following:

- It retries secondary or abuse rate limits (`403`) after an initial delay.
- It retries `5xx` responses immediately, except on issue and issue-comment
  listings.
- It retries `400` HTML pages that hide a server error immediately.
- It honours integer `Retry-After` headers.

`Client.rest()` returns an `httpx.Client` for the REST API.
`Client.graphql(query, variables)` returns the `data` object of a GraphQL
response. `batch_query` runs several field queries in a single request and
raises `ValueError` when given none.

A GraphQL response that carries errors raises `GraphQLErrors`. Its
`is_not_found()` method tells a missing resource apart from other failures, and
`has_type()` checks for any error type. `error_response_status_code` returns
the status code of an `ErrorResponse` found in an exception chain, or 0.

`critscore.githubapi.pagination` provides the `PagedQuery` abstract class and
`query()`. `query()` returns a `Cursor` that iterates over every item and
fetches further pages as it needs them.

## Command-line helpers

- `critscore.envflag.parse_args(parser, args, mapping)` fills `argparse` flags
  from the non-empty environment variables named in `mapping`. A flag given on
  the command line wins. `assign(parser, mapping)` only sets the defaults.
- `critscore.infile.open_input(filename, stdin_name)` opens a text file. It
  returns stdin when `filename` equals `stdin_name`, which defaults to `-`.
- `critscore.outfile` opens an output target:
  - `Opener`, or `define_flags(...)` together with `open_output(namespace)`,
    adds output, force and append flags to a parser.
  - With no file set, the output is stdout.
  - An existing file is not overwritten unless the force flag is given, and is
    appended to when the append flag is given.
  - Blob-store URLs with the `mem://` or `file://` scheme need the force flag.
    The data is stored when the writer is closed.
- `critscore.logsetup.new_logger_from_config(default_env, default_level, config)`
  builds a logger from the `log-env` (`dev` or `gcp`) and `log-level`
  settings. It falls back to the defaults when a setting is missing. The `gcp`
  environment writes JSON lines.
- `critscore.workerpool.worker_pool(n, worker)` starts `n` threads and returns
  a function that waits for all of them.

## What this package does not do

- It ships no command-line program. The helpers above are for building one.
- It does not collect signals from repositories itself. It scores records of
  values that you supply.
- It has no writers for CSV, JSON or text output of collected signals.
- Its blob-store output supports only the `mem://` and `file://` schemes. It
  does not support cloud storage buckets.