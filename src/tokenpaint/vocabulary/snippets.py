"""Example source text shown in the raw preview."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Snippet:
    language_id: str
    extension: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"languageId": self.language_id, "extension": self.extension, "content": self.content}


class SnippetProvider(Protocol):
    def snippet(self, language_id: str) -> Snippet: ...


_CSHARP = """\
// tokenType: namespace
namespace TokenPaint.Preview;

// tokenType: interface / method / parameter
public interface IGreeter
{
    string Greet(string name);
}

// tokenType: enum / enumMember
public enum Mood { Calm, Busy }

// tokenType: class / property / field
public sealed class Greeter : IGreeter
{
    private readonly int _count = 3;
    public Mood Mood { get; set; } = Mood.Calm;

    [Obsolete("decorator")]
    public string Greet(string name)
    {
        var text = $"Hello, {name}!"; // tokenType: variable / string
        return _count > 0 ? text : string.Empty;
    }
}
"""

_JAVA = """\
package tokenpaint.preview; // tokenType: namespace

import java.util.List;

// tokenType: interface / method / parameter
interface Greeter {
    String greet(String name);
}

// tokenType: enum / enumMember
enum Mood { CALM, BUSY }

// tokenType: class / property / decorator
public class Preview implements Greeter {
    private static final int COUNT = 3;

    @Override
    public String greet(String name) {
        List<String> parts = List.of("Hello", name); // tokenType: typeParameter / variable
        return String.join(", ", parts) + COUNT;
    }
}
"""

_CPP = """\
#include <string>
#define GREETING "Hello" // tokenType: macro

namespace preview { // tokenType: namespace

enum class Mood { Calm, Busy }; // tokenType: enum / enumMember

struct Point { int x; int y; }; // tokenType: struct / property

template <typename T> // tokenType: typeParameter
T twice(T value) { return value + value; } // tokenType: function / parameter

class Greeter { // tokenType: class / method
public:
    std::string greet(const std::string& name) const {
        auto text = std::string(GREETING) + ", " + name; // tokenType: variable
        return text;
    }
};

} // namespace preview
"""

_PYTHON = """\
\"\"\"tokenType: string / comment\"\"\"
import dataclasses  # tokenType: namespace
from enum import Enum


class Mood(Enum):  # tokenType: class / enumMember
    CALM = 1
    BUSY = 2


@dataclasses.dataclass  # tokenType: decorator
class Greeter:
    count: int = 3  # tokenType: property / number

    def greet(self, name: str) -> str:  # tokenType: method / parameter
        text = f"Hello, {name}!"  # tokenType: variable
        return text * self.count


def twice(value):  # tokenType: function
    return value + value
"""

_GO = """\
package preview // tokenType: namespace

import "fmt"

// tokenType: struct / property
type Point struct {
\tX int
\tY int
}

// tokenType: interface / method
type Greeter interface {
\tGreet(name string) string
}

const count = 3 // tokenType: variable readonly / number

// tokenType: function / parameter
func Twice[T int | float64](value T) T { // tokenType: typeParameter
\treturn value + value
}

func greet(name string) string {
\treturn fmt.Sprintf("Hello, %s!", name) // tokenType: string
}
"""

_RUST = """\
// tokenType: namespace
mod preview {
    // tokenType: struct / property
    pub struct Point { pub x: i32, pub y: i32 }

    // tokenType: enum / enumMember
    pub enum Mood { Calm, Busy }

    // tokenType: interface (trait) / method
    pub trait Greeter {
        fn greet(&self, name: &str) -> String;
    }

    // tokenType: macro / string
    pub fn greet(name: &str) -> String {
        format!("Hello, {}!", name)
    }

    // tokenType: typeParameter / parameter
    #[inline] // tokenType: decorator
    pub fn twice<T: std::ops::Add<Output = T> + Copy>(value: T) -> T {
        value + value
    }
}
"""

_GENERIC = """\
/* generic preview (TypeScript) */

// tokenType: namespace
namespace Preview {
  // tokenType: type / typeParameter
  export type Box<T> = { value: T };

  // tokenType: interface / method / parameter
  export interface Greeter {
    greet(name: string): string;
  }

  // tokenType: enum / enumMember
  export enum Mood { Calm, Busy }

  // tokenType: regexp
  const pattern = /hello\\s+world/i;

  // tokenType: class / property / decorator
  export class Console {
    readonly count = 3;
    @log
    greet(name: string): string {
      return pattern.test(name) ? name : `Hello, ${name}!`;
    }
  }
}
"""

_SNIPPETS: dict[str, tuple[str, str]] = {
    "csharp": ("cs", _CSHARP),
    "java": ("java", _JAVA),
    "cpp": ("cpp", _CPP),
    "python": ("py", _PYTHON),
    "go": ("go", _GO),
    "rust": ("rs", _RUST),
}


class BuiltinSnippets:
    """Snippets for the official languages; anything else gets the generic one."""

    def snippet(self, language_id: str) -> Snippet:
        extension, content = _SNIPPETS.get(language_id, ("ts", _GENERIC))
        return Snippet(language_id=language_id, extension=extension, content=content)
