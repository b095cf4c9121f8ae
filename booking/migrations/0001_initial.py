import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('fleet', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('start_time', models.TimeField(blank=True, null=True)),
                ('end_time', models.TimeField(blank=True, null=True)),
                ('pickup_point', models.CharField(blank=True, max_length=255)),
                ('dropoff_point', models.CharField(blank=True, max_length=255)),
                ('special_instructions', models.TextField(blank=True)),
                ('contact_name', models.CharField(blank=True, max_length=150)),
                ('contact_phone', models.CharField(blank=True, max_length=50)),
                ('contact_email', models.EmailField(blank=True, max_length=255)),
                ('source', models.CharField(choices=[('email', 'Email'), ('phone', 'Phone'), ('web', 'Web')], default='web', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('color', models.CharField(choices=[('default', 'Default'), ('emerald', 'Emerald'), ('sky', 'Sky'), ('amber', 'Amber'), ('rose', 'Rose')], default='default', max_length=20)),
                ('estimated_price_cents', models.PositiveIntegerField(blank=True, null=True)),
                ('admin_note', models.TextField(blank=True)),
                ('created_by_name', models.CharField(blank=True, max_length=150)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('customer_verify_token', models.CharField(blank=True, max_length=64)),
                ('customer_verified_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to='fleet.customer')),
                ('driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='fleet.driver')),
                ('vehicle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='fleet.vehicle')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['date'], name='booking_date_idx'),
                    models.Index(fields=['status'], name='booking_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BookingHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('create', 'Created'), ('update', 'Updated'), ('confirm', 'Confirmed'), ('cancel', 'Cancelled'), ('reschedule', 'Rescheduled')], max_length=20)),
                ('actor_role', models.CharField(blank=True, max_length=20)),
                ('changes', models.JSONField(blank=True, default=dict)),
                ('admin_only_note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('booking', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='booking.booking')),
            ],
            options={
                'ordering': ['-created_at'],
                'verbose_name_plural': 'Booking history',
            },
        ),
    ]
