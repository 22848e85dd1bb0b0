"""Shared fixtures for core unit tests"""

import pytest

from mdblocks.config import Settings
from mdblocks.core.parse import parse


SAMPLE_MD = """\
# Guide

Intro with **bold**, *em*, `code`, $x^2$ and [a link](https://example.com).

:::warning Careful
Watch out.
:::

- one
- two
  - nested

1. first
2. second

- [ ] todo
- [x] done

> quoted
>
> more

| Name | Value |
| --- | :---: |
| a | 1 |

$$
E=mc^2
$$

```mermaid
graph TD
```

```ts [app.ts] {2}
const a = 1
const b = 2
```

::: code-group
```js [a.js]
a()
```

```py [b.py]
b()
```
:::

<Badge type="tip" text="v1" />

<!--@include: ./parts/setup.md{3-9}-->

![Logo](/logo.png)

---

Footer.
"""


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings()


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_blocks")
def sample_blocks_fixture(settings):
    return parse(SAMPLE_MD, settings)
