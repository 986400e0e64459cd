"""Initial DuoFit schema

Revision ID: initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('color', sa.String(), nullable=False, server_default='YELLOW'),
        sa.Column('avatar', sa.String(), nullable=True),
        sa.Column('calorie_goal', sa.Float(), nullable=False, server_default='2000'),
        sa.Column('protein_goal_g', sa.Float(), nullable=False, server_default='150'),
        sa.Column('carbs_goal_g', sa.Float(), nullable=False, server_default='250'),
        sa.Column('fat_goal_g', sa.Float(), nullable=False, server_default='65'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)

    op.create_table(
        'food_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('calories', sa.Float(), nullable=False, server_default='0'),
        sa.Column('protein_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('fat_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('carbs_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_food_items_id'), 'food_items', ['id'], unique=False)
    op.create_index(op.f('ix_food_items_name'), 'food_items', ['name'], unique=False)

    op.create_table(
        'meals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('slot', sa.String(), nullable=False),
        sa.Column('eaten_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_calories', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_protein_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_fat_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_carbs_g', sa.Float(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_meals_id'), 'meals', ['id'], unique=False)
    op.create_index(op.f('ix_meals_user_id'), 'meals', ['user_id'], unique=False)
    op.create_index(op.f('ix_meals_eaten_at'), 'meals', ['eaten_at'], unique=False)

    op.create_table(
        'meal_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('meal_id', sa.Integer(), nullable=False),
        sa.Column('food_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(), nullable=False),
        sa.Column('calories', sa.Float(), nullable=False, server_default='0'),
        sa.Column('protein_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('fat_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('carbs_g', sa.Float(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['meal_id'], ['meals.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['food_id'], ['food_items.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_meal_items_id'), 'meal_items', ['id'], unique=False)
    op.create_index(op.f('ix_meal_items_meal_id'), 'meal_items', ['meal_id'], unique=False)

    op.create_table(
        'daily_nutrition',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('calories', sa.Float(), nullable=False, server_default='0'),
        sa.Column('protein_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('fat_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('carbs_g', sa.Float(), nullable=False, server_default='0'),
        sa.Column('goal_calories', sa.Float(), nullable=False),
        sa.Column('goal_met', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('invalid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='uq_daily_nutrition_user_date'),
    )
    op.create_index(op.f('ix_daily_nutrition_id'), 'daily_nutrition', ['id'], unique=False)
    op.create_index(op.f('ix_daily_nutrition_date'), 'daily_nutrition', ['date'], unique=False)

    op.create_table(
        'daily_points',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('exercise_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('calorie_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_points', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='uq_daily_points_user_date'),
    )
    op.create_index(op.f('ix_daily_points_id'), 'daily_points', ['id'], unique=False)
    op.create_index(op.f('ix_daily_points_date'), 'daily_points', ['date'], unique=False)

    op.create_table(
        'exercises',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('duration_min', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('performed_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_exercises_id'), 'exercises', ['id'], unique=False)
    op.create_index(op.f('ix_exercises_user_id'), 'exercises', ['user_id'], unique=False)
    op.create_index(op.f('ix_exercises_performed_at'), 'exercises', ['performed_at'], unique=False)

    op.create_table(
        'streaks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('current', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('longest', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_date', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_streaks_id'), 'streaks', ['id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_streaks_id'), table_name='streaks')
    op.drop_table('streaks')
    op.drop_index(op.f('ix_exercises_performed_at'), table_name='exercises')
    op.drop_index(op.f('ix_exercises_user_id'), table_name='exercises')
    op.drop_index(op.f('ix_exercises_id'), table_name='exercises')
    op.drop_table('exercises')
    op.drop_index(op.f('ix_daily_points_date'), table_name='daily_points')
    op.drop_index(op.f('ix_daily_points_id'), table_name='daily_points')
    op.drop_table('daily_points')
    op.drop_index(op.f('ix_daily_nutrition_date'), table_name='daily_nutrition')
    op.drop_index(op.f('ix_daily_nutrition_id'), table_name='daily_nutrition')
    op.drop_table('daily_nutrition')
    op.drop_index(op.f('ix_meal_items_meal_id'), table_name='meal_items')
    op.drop_index(op.f('ix_meal_items_id'), table_name='meal_items')
    op.drop_table('meal_items')
    op.drop_index(op.f('ix_meals_eaten_at'), table_name='meals')
    op.drop_index(op.f('ix_meals_user_id'), table_name='meals')
    op.drop_index(op.f('ix_meals_id'), table_name='meals')
    op.drop_table('meals')
    op.drop_index(op.f('ix_food_items_name'), table_name='food_items')
    op.drop_index(op.f('ix_food_items_id'), table_name='food_items')
    op.drop_table('food_items')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
