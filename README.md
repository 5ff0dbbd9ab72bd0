# clisources

This package looks up a flag's value from an ordered list of places. The first
place that has a value wins. A place can be an environment variable, a file, or
a key in a nested mapping, such as a parsed configuration file.

## Installation

```
pip install clisources
```

## Environment variables and files

```python
from clisources.value_source import env_vars, files

chain = env_vars("APP_PORT", "PORT")
chain.append(files("/etc/app/port"))

found = chain.lookup_with_source()
if found is not None:
    value, source = found
    print(f"port {value} taken from {source}")

print(chain.env_keys())   # ['APP_PORT', 'PORT']
print(str(chain))         # environment variable "APP_PORT",environment variable "PORT",file "/etc/app/port"
```

- `lookup()` returns the first value found, as a string. It returns `None`
  when no source in the chain has a value.
- `lookup_with_source()` returns a `(value, source)` pair, or `None`.
- A chain can be iterated, and `len()` works on it.

`env_var(key)` reads one environment variable. Whitespace around the key is
stripped before the lookup.

`file(path)` reads a whole file. The value is the full contents of the file,
decoded as UTF-8. If the file is missing or cannot be read, the lookup gives
`None`.

## Nested maps

A `MapSource` wraps a mapping under a name. `MapSource.lookup` takes a dotted
key and follows it into nested mappings. It raises `KeyError` when the path
does not lead to a value, or when it passes through something that is not a
mapping.

A `MapValueSource` ties one key to a `MapSource`, so it can sit in a chain
beside the other sources:

```python
from clisources.value_source import MapSource, MapValueSource, ValueSourceChain

config = MapSource("config", {"server": {"port": 8080}})
chain = ValueSourceChain([MapValueSource("server.port", config)])

print(chain.lookup())     # 8080
print(str(chain))         # key "server.port" from map source "config"
```

Values taken from a map are turned into text by `format_value`, the way they
would be written on a command line:

```python
from clisources.value_source import format_value

format_value(True)              # 'true'
format_value([10])              # '[10]'
format_value({"b": 1, "a": 2})  # 'map[a:2 b:1]'
format_value(None)              # '<nil>'
```

## Writing your own source

Subclass `ValueSource` and write a `lookup()` method. It should return the
value as a string, or `None` when there is no value.

A source that reads from the environment should also subclass
`EnvValueSource`. It needs a `key` attribute, and `is_from_env()` must return
`True`. `ValueSourceChain.env_keys()` then lists its key, for example when
help text is printed.

## What this package does not do

This package only supplies sources for values. It does not define flags or
commands, and it does not parse command lines or print help. It provides no
command of its own.

## Running the tests

```
pip install -e ".[test]"
pytest
```