"""Create conference registration tables"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a7d51c0e9b2'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create conference table
    op.create_table(
        'conference',
        sa.Column('confcode', sa.String(20), nullable=False),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('date_from', sa.Date(), nullable=True),
        sa.Column('date_to', sa.Date(), nullable=True),
        sa.Column('venue', sa.String(200), nullable=True),
        sa.Column('reg_limit', sa.Integer(), nullable=True),
        sa.Column('reg_alert_count', sa.Integer(), nullable=True),
        sa.Column('domain', sa.String(255), nullable=True),
        sa.Column('prefix', sa.String(20), nullable=True),
        sa.Column('psgc', sa.Text(), nullable=True),
        sa.Column('include_psgc', sa.Text(), nullable=True),
        sa.Column('exclude_psgc', sa.Text(), nullable=True),
        sa.Column('on_maintenance', sa.String(1), server_default='N'),
        sa.Column('notification', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('confcode')
    )
    op.create_index(op.f('ix_conference_domain'), 'conference', ['domain'])

    # Create regh table (registration header)
    op.create_table(
        'regh',
        sa.Column('regnum', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('regid', sa.String(6), nullable=False),
        sa.Column('confcode', sa.String(20), nullable=False),
        sa.Column('province', sa.String(150), nullable=False),
        sa.Column('lgu', sa.String(150), nullable=False),
        sa.Column('contactperson', sa.String(150), nullable=False),
        sa.Column('contactnum', sa.String(30), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('regdate', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), server_default='PENDING', nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('payment_proof_url', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['confcode'], ['conference.confcode']),
        sa.PrimaryKeyConstraint('regnum'),
        sa.UniqueConstraint('regid')
    )
    op.create_index(op.f('ix_regh_regid'), 'regh', ['regid'])
    op.create_index(op.f('ix_regh_confcode'), 'regh', ['confcode'])

    # Create regd table (one row per participant)
    op.create_table(
        'regd',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('regnum', sa.Integer(), nullable=False),
        sa.Column('regid', sa.String(6), nullable=False),
        sa.Column('confcode', sa.String(20), nullable=False),
        sa.Column('linenum', sa.Integer(), nullable=False),
        sa.Column('lastname', sa.String(100), nullable=False),
        sa.Column('firstname', sa.String(100), nullable=False),
        sa.Column('middleinit', sa.String(10), nullable=True),
        sa.Column('suffix', sa.String(10), nullable=True),
        sa.Column('designation', sa.String(150), nullable=True),
        sa.Column('brgy', sa.String(150), nullable=True),
        sa.Column('lgu', sa.String(150), nullable=False),
        sa.Column('province', sa.String(150), nullable=False),
        sa.Column('tshirtsize', sa.String(5), nullable=True),
        sa.Column('contactnum', sa.String(30), nullable=True),
        sa.Column('prcnum', sa.String(30), nullable=True),
        sa.Column('expirydate', sa.Date(), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(['regnum'], ['regh.regnum'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('regnum', 'linenum', name='uq_regd_regnum_linenum')
    )
    op.create_index(op.f('ix_regd_regnum'), 'regd', ['regnum'])
    op.create_index(op.f('ix_regd_regid'), 'regd', ['regid'])
    op.create_index(op.f('ix_regd_confcode'), 'regd', ['confcode'])
    op.create_index(op.f('ix_regd_province'), 'regd', ['province'])

    # Create regdep table (payment proofs)
    op.create_table(
        'regdep',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('regid', sa.String(6), nullable=False),
        sa.Column('confcode', sa.String(20), nullable=False),
        sa.Column('linenum', sa.Integer(), nullable=False),
        sa.Column('payment_proof_url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['regid'], ['regh.regid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('regid', 'confcode', 'linenum', name='uq_regdep_regid_confcode_linenum')
    )
    op.create_index(op.f('ix_regdep_regid'), 'regdep', ['regid'])

    # Reference tables
    op.create_table(
        'lgus',
        sa.Column('psgc', sa.String(12), nullable=False),
        sa.Column('lguname', sa.String(150), nullable=False),
        sa.Column('geolevel', sa.String(10), nullable=False),
        sa.PrimaryKeyConstraint('psgc')
    )
    op.create_index(op.f('ix_lgus_lguname'), 'lgus', ['lguname'])
    op.create_index(op.f('ix_lgus_geolevel'), 'lgus', ['geolevel'])

    op.create_table(
        'positions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('lvl', sa.String(20), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'banks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('confcode', sa.String(20), nullable=False),
        sa.Column('bank_name', sa.String(150), nullable=False),
        sa.Column('acct_no', sa.String(50), nullable=False),
        sa.Column('payee', sa.String(150), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_banks_confcode'), 'banks', ['confcode'])

    op.create_table(
        'contacts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('confcode', sa.String(20), nullable=False),
        sa.Column('contact_no', sa.String(30), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_contacts_confcode'), 'contacts', ['confcode'])


def downgrade():
    op.drop_table('contacts')
    op.drop_table('banks')
    op.drop_table('positions')
    op.drop_table('lgus')
    op.drop_table('regdep')
    op.drop_table('regd')
    op.drop_table('regh')
    op.drop_table('conference')
