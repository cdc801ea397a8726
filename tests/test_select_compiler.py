"""
Tests for SELECT compilation and identifier quoting.
"""
import pytest

from sqlrepo.domain.entities.query_state import (
  BuilderState,
  Conjunction,
  QueryCondition,
  SortDirection,
  SortOrder,
)
from sqlrepo.domain.services.select_compiler import (
  SelectCompiler,
  condition_placeholder,
  quote_identifier,
)


@pytest.fixture
def compiler():
  return SelectCompiler()


class TestQuoteIdentifier:
  """Test backtick quoting of table and column names."""

  def test_plain_name(self):
    assert quote_identifier('users') == '`users`'

  def test_embedded_backtick_is_doubled(self):
    assert quote_identifier('a`b') == '`a``b`'

  def test_only_backticks(self):
    assert quote_identifier('``') == '``````'

  def test_reserved_word_and_spaces_are_kept(self):
    assert quote_identifier('order by') == '`order by`'


class TestConditionPlaceholder:
  """Test bind names derived from column names."""

  def test_suffixes_index(self):
    assert condition_placeholder('status', 0) == 'status_0'

  def test_strips_non_alphanumeric(self):
    assert condition_placeholder('user-name.x`y', 3) == 'usernamexy_3'

  def test_keeps_underscores(self):
    assert condition_placeholder('created_at', 1) == 'created_at_1'


class TestSelectCompiler:
  """Test the assembly of SELECT statements from builder state."""

  def test_empty_state(self, compiler):
    compiled = compiler.compile('t', BuilderState())
    assert compiled.sql == 'SELECT * FROM `t`'
    assert compiled.params == {}

  def test_first_condition_always_renders_as_where(self, compiler):
    state = BuilderState(conditions=[
      QueryCondition(Conjunction.AND, 'status', '=', 'active'),
      QueryCondition(Conjunction.OR, 'role', '=', 'admin'),
    ])
    compiled = compiler.compile('t', state)
    assert compiled.sql == 'SELECT * FROM `t` WHERE `status` = :status_0 OR `role` = :role_0'
    assert compiled.params == {'status_0': 'active', 'role_0': 'admin'}

  def test_leading_or_condition_ignores_its_conjunction(self, compiler):
    state = BuilderState(conditions=[QueryCondition(Conjunction.OR, 'a', '=', 1)])
    assert compiler.compile('t', state).sql == 'SELECT * FROM `t` WHERE `a` = :a_0'

  def test_same_column_twice_gets_distinct_placeholders(self, compiler):
    state = BuilderState(conditions=[
      QueryCondition(Conjunction.AND, 'age', '>', 18),
      QueryCondition(Conjunction.AND, 'age', '<', 65),
    ])
    compiled = compiler.compile('people', state)
    assert compiled.sql == 'SELECT * FROM `people` WHERE `age` > :age_0 AND `age` < :age_1'
    assert compiled.params == {'age_0': 18, 'age_1': 65}

  def test_columns_stripping_to_same_name_do_not_collide(self, compiler):
    state = BuilderState(conditions=[
      QueryCondition(Conjunction.AND, 'a-b', '=', 1),
      QueryCondition(Conjunction.OR, 'ab', '=', 2),
      QueryCondition(Conjunction.AND, 'c', '=', 3),
    ])
    compiled = compiler.compile('t', state)
    assert compiled.sql == 'SELECT * FROM `t` WHERE `a-b` = :ab_0 OR `ab` = :ab_1 AND `c` = :c_0'
    assert compiled.params == {'ab_0': 1, 'ab_1': 2, 'c_0': 3}

  def test_placeholder_in_sql_matches_param_key(self, compiler):
    state = BuilderState(conditions=[QueryCondition(Conjunction.AND, 'e-mail', 'LIKE', '%@x.org')])
    compiled = compiler.compile('t', state)
    assert compiled.sql.endswith('`e-mail` LIKE :email_0')
    assert compiled.params == {'email_0': '%@x.org'}

  def test_operator_is_inserted_verbatim(self, compiler):
    """Operators are caller-trusted; nothing is validated or rewritten."""
    state = BuilderState(conditions=[QueryCondition(Conjunction.AND, 'id', '= 1 OR 1 =', 1)])
    assert compiler.compile('t', state).sql == 'SELECT * FROM `t` WHERE `id` = 1 OR 1 = :id_0'

  def test_order_by_in_insertion_order(self, compiler):
    state = BuilderState(sort_orders=[
      SortOrder('created_at', SortDirection.DESC),
      SortOrder('name', SortDirection.ASC),
    ])
    compiled = compiler.compile('t', state)
    assert compiled.sql == 'SELECT * FROM `t` ORDER BY `created_at` DESC, `name` ASC'

  def test_limit_without_offset(self, compiler):
    compiled = compiler.compile('t', BuilderState(limit=10))
    assert compiled.sql == 'SELECT * FROM `t` LIMIT :__limit'
    assert compiled.params == {'__limit': 10}

  def test_limit_with_offset(self, compiler):
    compiled = compiler.compile('t', BuilderState(limit=10, offset=5))
    assert compiled.sql == 'SELECT * FROM `t` LIMIT :__limit OFFSET :__offset'
    assert compiled.params == {'__limit': 10, '__offset': 5}

  def test_offset_without_limit_is_not_emitted(self, compiler):
    compiled = compiler.compile('t', BuilderState(offset=5))
    assert compiled.sql == 'SELECT * FROM `t`'
    assert compiled.params == {}

  def test_limit_zero_is_emitted(self, compiler):
    compiled = compiler.compile('t', BuilderState(limit=0, offset=0))
    assert compiled.sql.endswith('LIMIT :__limit OFFSET :__offset')
    assert compiled.params == {'__limit': 0, '__offset': 0}

  def test_custom_column_list(self, compiler):
    state = BuilderState(conditions=[QueryCondition(Conjunction.AND, 'status', '=', 'active')])
    compiled = compiler.compile('users', state, 'COUNT(*) AS total')
    assert compiled.sql == 'SELECT COUNT(*) AS total FROM `users` WHERE `status` = :status_0'

  def test_full_statement_clause_order(self, compiler):
    state = BuilderState(
      conditions=[
        QueryCondition(Conjunction.AND, 'status', '=', 'active'),
        QueryCondition(Conjunction.OR, 'status', '=', 'pending'),
      ],
      sort_orders=[SortOrder('id', SortDirection.DESC)],
      limit=5,
      offset=10,
    )
    compiled = compiler.compile('a`b', state)
    assert compiled.sql == (
      'SELECT * FROM `a``b` WHERE `status` = :status_0 OR `status` = :status_1 '
      'ORDER BY `id` DESC LIMIT :__limit OFFSET :__offset'
    )
    assert compiled.params == {'status_0': 'active', 'status_1': 'pending', '__limit': 5, '__offset': 10}

  def test_compile_does_not_mutate_state(self, compiler):
    state = BuilderState(conditions=[QueryCondition(Conjunction.AND, 'a', '=', 1)], limit=1)
    compiler.compile('t', state)
    assert len(state.conditions) == 1
    assert state.limit == 1
