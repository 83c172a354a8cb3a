"""Example: Adding custom converters without modifying registry.py.

Word counts arrive as (word, count) records. We lower-case the word to get
the field name and sum counts when two spellings collapse onto one field.
"""

from json_output_format.writers.json_writer import JsonConverters
from json_output_format.writers.merge import add
from json_output_format.writers.registry import register_converters, list_converters

register_converters(
    "word_count",
    JsonConverters(
        convert_key=lambda word: str(word).lower(),
        convert_value=int,
        merge=add,
    ),
)

print("Registered converters:")
for name in list_converters():
    print(f"  {name}")

# Now you can use it in config:
# jof:
#   converters: word_count
