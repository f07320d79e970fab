import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Season',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=255)),
                ('tag', models.SlugField(unique=True)),
                ('is_active', models.BooleanField(default=False)),
            ],
            options={
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Squad',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=255)),
            ],
            options={
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=255)),
                ('sequence', models.PositiveIntegerField()),
                ('is_settled', models.BooleanField(default=False)),
                ('season', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='predictions.season')),
            ],
            options={
                'ordering': ['season', 'sequence'],
            },
        ),
        migrations.CreateModel(
            name='BundleLock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('group_code', models.PositiveIntegerField()),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='predictions.event')),
            ],
        ),
        migrations.CreateModel(
            name='Question',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('group_code', models.PositiveIntegerField()),
                ('lineup', models.PositiveIntegerField(default=0)),
                ('text', models.CharField(blank=True, max_length=255)),
                ('points', models.FloatField(default=0)),
                ('margin', models.PositiveIntegerField(blank=True, null=True)),
                ('step', models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ('decimals', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('result_type', models.CharField(choices=[('text', 'Exact text'), ('list', 'List selection'), ('number', 'Whole number'), ('decimal', 'Decimal number'), ('time', 'Time (HH:MM:SS)'), ('length', 'Length (m,cc)'), ('score', 'Score with draw')], max_length=16)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='questions', to='predictions.event')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='predictions.question')),
            ],
            options={
                'ordering': ['event', 'group_code', 'lineup', 'id'],
            },
        ),
        migrations.CreateModel(
            name='ListItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('label', models.CharField(max_length=255)),
                ('lineup', models.PositiveIntegerField(default=0)),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='list_items', to='predictions.question')),
            ],
            options={
                'ordering': ['question', 'lineup', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Answer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('result', models.CharField(max_length=255)),
                ('label', models.CharField(max_length=255)),
                ('posted', models.BooleanField(default=True)),
                ('points', models.FloatField(default=0)),
                ('score', models.FloatField(default=0)),
                ('correct', models.BooleanField(default=False)),
                ('gray', models.BooleanField(default=False)),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='predictions.question')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to=settings.AUTH_USER_MODEL)),
                ('list_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to='predictions.listitem')),
            ],
        ),
        migrations.CreateModel(
            name='Solution',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('result', models.CharField(max_length=255)),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='solutions', to='predictions.question')),
                ('list_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to='predictions.listitem')),
            ],
            options={
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='SquadMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('is_captain', models.BooleanField(default=False)),
                ('season', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='predictions.season')),
                ('squad', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='predictions.squad')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='SquadSnapshot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('sequence', models.PositiveIntegerField()),
                ('margin_aware', models.BooleanField(default=False)),
                ('score', models.FloatField(default=0)),
                ('seed', models.PositiveIntegerField(default=0)),
                ('previous_seed', models.PositiveIntegerField(default=0)),
                ('previous_score', models.FloatField(default=0)),
                ('movement', models.IntegerField(default=0)),
                ('season', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='predictions.season')),
                ('squad', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='snapshots', to='predictions.squad')),
            ],
            options={
                'ordering': ['season', 'sequence', 'seed'],
            },
        ),
        migrations.CreateModel(
            name='SquadSnapshotMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date_created', models.DateTimeField(auto_now_add=True)),
                ('date_modified', models.DateTimeField(auto_now=True)),
                ('contribution', models.FloatField(default=0)),
                ('snapshot', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contributions', to='predictions.squadsnapshot')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'abstract': False,
            },
        ),
        migrations.AddIndex(
            model_name='answer',
            index=models.Index(fields=['question', 'user'], name='answer_question_user_idx'),
        ),
        migrations.AddConstraint(
            model_name='event',
            constraint=models.UniqueConstraint(fields=('season', 'sequence'), name='unique_event_sequence'),
        ),
        migrations.AddConstraint(
            model_name='bundlelock',
            constraint=models.UniqueConstraint(fields=('event', 'group_code'), name='unique_bundle_lock'),
        ),
        migrations.AddConstraint(
            model_name='squadmember',
            constraint=models.UniqueConstraint(fields=('season', 'user'), name='one_squad_per_season'),
        ),
        migrations.AddConstraint(
            model_name='squadsnapshot',
            constraint=models.UniqueConstraint(fields=('squad', 'season', 'sequence', 'margin_aware'), name='unique_squad_snapshot'),
        ),
    ]
